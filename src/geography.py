"""
City to region lookup and geography-based ordering (north, central, south, east).
"""
from content_types import UNCLASSIFIED

REGION_ORDER = ["北部", "中部", "南部", "東部"]

# region -> cities in display order
REGION_CITIES = {
    "北部": ["台北市", "新北市", "桃園市", "新竹市", "新竹縣", "基隆市", "宜蘭縣"],
    "中部": ["台中市", "苗栗縣", "彰化縣", "南投縣", "雲林縣"],
    "南部": ["高雄市", "台南市", "嘉義市", "嘉義縣", "屏東縣", "澎湖縣"],
    "東部": ["花蓮縣", "台東縣"],
}

CITY_REGIONS = {
    city: region
    for region, cities in REGION_CITIES.items()
    for city in cities
}


def get_region(city):
    """Region for a city; unknown or empty cities go to the unclassified bucket."""
    return CITY_REGIONS.get(city or UNCLASSIFIED, UNCLASSIFIED)


def city_sort_key(city):
    """Region rank, then rank within the region, then name; unclassified last."""
    if city == UNCLASSIFIED:
        return (2, 0, 0, "")
    region = CITY_REGIONS.get(city)
    if region is None:
        return (1, 99, 999, city)
    return (0, REGION_ORDER.index(region), REGION_CITIES[region].index(city), city)


def region_sort_key(region):
    if region in REGION_ORDER:
        return (REGION_ORDER.index(region), region)
    if region == UNCLASSIFIED:
        return (len(REGION_ORDER) + 1, region)
    return (len(REGION_ORDER), region)


def sort_cities(cities):
    return sorted(cities, key=city_sort_key)


def sort_regions(regions):
    return sorted(regions, key=region_sort_key)
