# src/config/__init__.py
"""
Конфигурация сервиса такси (config/config.json + переменные окружения).
"""

from src.config.loader import Settings, TaxiSettings, get_settings, settings

__all__ = ["Settings", "TaxiSettings", "get_settings", "settings"]
