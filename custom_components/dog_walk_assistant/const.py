"""Constants for Dog Walk Assistant."""

# Integration identity
DOMAIN = "dog_walk_assistant"
DEFAULT_NAME = "Dog Walk Assistant"

# Update interval (seconds) default used by coordinator
DEFAULT_UPDATE_INTERVAL = 30 * 60  # seconds
MIN_UPDATE_INTERVAL = 5 * 60

# Open-Meteo endpoint
OM_BASE = "https://api.open-meteo.com/v1/forecast"
OM_TIMEOUT = 30  # seconds

# Only the next day or so is scored; two days lets the best-next scan look 24h ahead late in the evening
FORECAST_DAYS = 2

# hourly params requested from Open-Meteo
OM_PARAMS_HOURLY = [
    "temperature_2m",
    "apparent_temperature",
    "relative_humidity_2m",
    "uv_index",
    "precipitation_probability",
    "weathercode",
    "wind_speed_10m",
    "wind_gusts_10m",
    "cloudcover",
]

OM_PARAMS_DAILY = [
    "sunrise",
    "sunset",
]

FETCH_CACHE_TTL = 600  # seconds for shared in-memory Open-Meteo fetch cache

# Packaged breed directory (TheDogAPI record shape)
BREEDS_FILE = "breeds.json"

# ----- Config keys used by the flow and entry data -----
CONF_NAME = "name"
CONF_LATITUDE = "latitude"
CONF_LONGITUDE = "longitude"
CONF_BREED_ID = "breed"
CONF_UPDATE_INTERVAL = "update_interval"

# Sensor kinds
SENSOR_WALK_SCORE = "walk_score"
SENSOR_BEST_NEXT_HOUR = "best_next_hour"
SENSOR_BEST_WINDOW = "best_window"
