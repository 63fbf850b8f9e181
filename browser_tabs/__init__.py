# Browser Tabs Package
# Tab session lifecycle for a browser host window

__version__ = "1.0.0"
__author__ = "Browser Practice Project"

# Re-export main classes for convenience
from .core.tab_control import TabControl
from .content.tab import Tab, TabState
from .content.settings import BrowserSettings
from .content.saved_state import SavedState

__all__ = ['TabControl', 'Tab', 'TabState', 'BrowserSettings', 'SavedState']
