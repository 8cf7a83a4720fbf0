from ec2_macos_watchdog.domain.ports.archive_store_port import ArchiveStorePort
from ec2_macos_watchdog.domain.ports.collector_port import DiagnosticCollectorPort
from ec2_macos_watchdog.domain.ports.identity_port import HostIdentityPort
from ec2_macos_watchdog.domain.ports.probe_port import ConnectivityProbePort

__all__ = [
    "ArchiveStorePort",
    "ConnectivityProbePort",
    "DiagnosticCollectorPort",
    "HostIdentityPort",
]
