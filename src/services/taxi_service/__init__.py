# src/services/taxi_service/__init__.py
"""
Сервис такси.

Хранит записи машин, назначает водителя, регистрирует поездки,
принимает позицию и ищет такси в заданном радиусе.
"""
