from ec2_macos_watchdog.application.dto.monitor_config import CollectionConfig, MonitorConfig

__all__ = [
    "CollectionConfig",
    "MonitorConfig",
]
