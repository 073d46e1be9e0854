from .base import populate_base_environment

__all__ = ['populate_base_environment']
