"""screen-translate — capture, analyze, translate, and render bilingual overlays."""

__version__ = "0.1.0"
