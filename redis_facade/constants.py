"""
Redis Facade Constants

Centralized location for command names and connection pool defaults.
"""

# Command names, used as the operation name in log records and span names
REDIS_GET_COMMAND = "redisClientGet"
REDIS_SET_COMMAND = "redisClientSet"
REDIS_DELETE_COMMAND = "redisClientDelete"
REDIS_GET_FROM_DB = "redisGetFromDB"
REDIS_PUT_IN_DB = "redisPutInDB"
REDIS_KEYS_COMMAND = "redisKeysFromPattern"

# Connection pool defaults, applied when pool sizing is not configured
DEFAULT_MAX_TOTAL = 8
DEFAULT_MIN_IDLE = 0
DEFAULT_MAX_IDLE = 8

APP_VERSION = "1.0.0"
