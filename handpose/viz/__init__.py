from .overlay import OverlayRenderer, create_overlay_renderer

__all__ = ["OverlayRenderer", "create_overlay_renderer"]
