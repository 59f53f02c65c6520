# Lightweight package init: avoid eager imports that can fail at console start.
__all__ = ["JunitReporter", "ReportBuilder", "ReporterOptions"]

def __getattr__(name):
    if name == "JunitReporter":
        from .reporters.junit import JunitReporter as _JunitReporter
        return _JunitReporter
    if name == "ReportBuilder":
        from .reporters.builder import ReportBuilder as _ReportBuilder
        return _ReportBuilder
    if name == "ReporterOptions":
        from .config import ReporterOptions as _ReporterOptions
        return _ReporterOptions
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
