"""Тестовый набор машин для пустой коллекции такси."""

SEED_TAXIS: tuple[dict, ...] = (
    {"maker": "Fiat", "model": "Palio", "year": 2014, "color": "Preto"},
    {"maker": "Fiat", "model": "Uno", "year": 2012, "color": "Verde"},
    {"maker": "Ford", "model": "Ka", "year": 2017, "color": "Branco"},
    {"maker": "Ford", "model": "Fiesta", "year": 2015, "color": "Azul"},
    {"maker": "Chevrolet", "model": "Onix", "year": 2016, "color": "Preto"},
    {"maker": "Chrevolet", "model": "Cobalt", "year": 2015, "color": "Prata"},
    {"maker": "Hyundai", "model": "HB20", "year": 2017, "color": "Branco"},
    {"maker": "Renault", "model": "Sandero", "year": 2013, "color": "Vermelho"},
    {"maker": "Volkswagen", "model": "Gol", "year": 2018, "color": "Prata"},
    {"maker": "Volkswagen", "model": "Voyage", "year": 2017, "color": "Branco"},
)
