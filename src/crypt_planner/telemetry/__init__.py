from .logging import LoggerTelemetry, NullTelemetry, Telemetry

__all__ = ["LoggerTelemetry", "NullTelemetry", "Telemetry"]
