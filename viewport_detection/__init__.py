"""Click-based photo detection and straightened previews for scanned sheets."""

__version__ = "0.1.0"

_LAZY_IMPORTS = {
    "detect_frame": ".detection",
    "render_preview": ".detection",
    "load_image": ".detection",
    "analyze_click": ".detection",
    "generate_preview": ".detection",
    "AnalysisOptions": ".models",
    "AnalysisResult": ".models",
    "BackgroundColor": ".models",
    "BoundingBox": ".models",
    "Direction": ".models",
    "Point": ".models",
    "PreviewConfig": ".models",
    "PreviewResult": ".models",
    "ViewportFrame": ".models",
}


def __getattr__(name):
    """Lazy import to avoid loading cv2 for CLI subcommands that don't need it."""
    if name in _LAZY_IMPORTS:
        from importlib import import_module

        module = import_module(_LAZY_IMPORTS[name], __name__)
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "detect_frame",
    "render_preview",
    "load_image",
    "analyze_click",
    "generate_preview",
    "AnalysisOptions",
    "AnalysisResult",
    "BackgroundColor",
    "BoundingBox",
    "Direction",
    "Point",
    "PreviewConfig",
    "PreviewResult",
    "ViewportFrame",
]
