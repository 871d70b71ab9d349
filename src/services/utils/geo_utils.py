import math

from src.common.constants import EARTH_RADIUS_KM


def _to_radians(degrees: float) -> float:
    return degrees * math.pi / 180


def get_distance_by_lat_lon(
    taxi_lat: float,
    taxi_lon: float,
    point_lat: float,
    point_lon: float,
) -> float:
    """
    Расстояние (км) по большой окружности между позицией такси и точкой,
    сферическая теорема косинусов.

    Аргумент acos ограничивается отрезком [-1, 1]: для совпадающих или почти
    совпадающих точек погрешность округления может вывести его за 1.
    """
    taxi_lat_rad = _to_radians(taxi_lat)
    taxi_lon_rad = _to_radians(taxi_lon)
    point_lat_rad = _to_radians(point_lat)
    point_lon_rad = _to_radians(point_lon)

    cos_angle = (
        math.cos(point_lat_rad) * math.cos(taxi_lat_rad) * math.cos(taxi_lon_rad - point_lon_rad)
        + math.sin(point_lat_rad) * math.sin(taxi_lat_rad)
    )
    cos_angle = max(-1.0, min(1.0, cos_angle))

    return EARTH_RADIUS_KM * math.acos(cos_angle)
