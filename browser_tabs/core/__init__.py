# Core - tab collection owned by the host window
from .tab_control import TabControl

__all__ = ['TabControl']
