from ec2_macos_watchdog.application.network_health_monitor import NetworkHealthMonitor

__all__ = ["NetworkHealthMonitor"]
