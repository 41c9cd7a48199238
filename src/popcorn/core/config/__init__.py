from .main import BrowserConfig, DemoConfig, PopcornConfig, ProjectConfig, ViewportConfig

__all__ = ["BrowserConfig", "DemoConfig", "PopcornConfig", "ProjectConfig", "ViewportConfig"]
