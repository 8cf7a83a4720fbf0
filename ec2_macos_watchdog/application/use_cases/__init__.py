from ec2_macos_watchdog.application.use_cases.collect_diagnostics import CollectDiagnostics

__all__ = ["CollectDiagnostics"]
