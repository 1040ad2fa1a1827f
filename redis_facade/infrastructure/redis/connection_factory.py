"""
Redis Connection Factory

Builds the redis.asyncio client for the configured topology
(standalone, cluster or sentinel) with pool sizing from settings.
The client is created once and shared; the hosting process closes it.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, List, Optional, Tuple

from redis.asyncio import ConnectionPool, Redis
from redis.asyncio.cluster import ClusterNode, RedisCluster
from redis.asyncio.sentinel import Sentinel

from ...constants import DEFAULT_MAX_IDLE, DEFAULT_MAX_TOTAL, DEFAULT_MIN_IDLE
from ...core.config import Settings, get_settings
from .backend import RedisCacheBackend, RedisClient
from .exceptions import RedisConfigurationException

logger = logging.getLogger(__name__)


class Topology(str, Enum):
    """How the cache backend is reached."""

    STANDALONE = "standalone"
    CLUSTER = "cluster"
    SENTINEL = "sentinel"


@dataclass(frozen=True)
class PoolConfig:
    """Connection pool sizing.

    redis-py pools are bounded by ``max_connections`` only, so ``max_total``
    is applied and the idle bounds are reported for monitoring.
    """

    max_total: int = DEFAULT_MAX_TOTAL
    min_idle: int = DEFAULT_MIN_IDLE
    max_idle: int = DEFAULT_MAX_IDLE

    @classmethod
    def from_settings(cls, settings: Settings) -> "PoolConfig":
        return cls(
            max_total=_default(settings.REDIS_POOL_MAX_ACTIVE, DEFAULT_MAX_TOTAL),
            min_idle=_default(settings.REDIS_POOL_MIN_IDLE, DEFAULT_MIN_IDLE),
            max_idle=_default(settings.REDIS_POOL_MAX_IDLE, DEFAULT_MAX_IDLE),
        )


def _default(value: Optional[int], fallback: int) -> int:
    return fallback if value is None else value


def parse_nodes(nodes: List[str], config_key: str) -> List[Tuple[str, int]]:
    """
    Parse ``host:port`` node strings.

    Raises:
        RedisConfigurationException: If a node is not a valid host:port pair
    """
    parsed = []
    for node in nodes:
        host, sep, port = node.strip().rpartition(":")
        if not sep or not host:
            raise RedisConfigurationException(
                message=f"Invalid Redis node '{node}', expected host:port",
                config_key=config_key,
                config_value=node,
            )
        try:
            port_number = int(port)
        except ValueError as e:
            raise RedisConfigurationException(
                message=f"Invalid port in Redis node '{node}'",
                config_key=config_key,
                config_value=node,
                original_error=e,
            )
        if not 0 < port_number < 65536:
            raise RedisConfigurationException(
                message=f"Port out of range in Redis node '{node}'",
                config_key=config_key,
                config_value=node,
            )
        parsed.append((host, port_number))
    return parsed


class RedisConnectionFactory:
    """
    Factory for creating and managing the shared Redis client.

    Picks the topology from settings: sentinel when enabled, else cluster
    when enabled, else a standalone server.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.pool_config = PoolConfig.from_settings(self.settings)
        self._client: Optional[RedisClient] = None
        self._sentinel: Optional[Sentinel] = None

        # Validate node lists up front so bad configuration fails at startup
        self._sentinel_nodes = parse_nodes(
            self.settings.REDIS_SENTINEL_NODES, "REDIS_SENTINEL_NODES"
        )
        self._cluster_nodes = parse_nodes(
            self.settings.REDIS_CLUSTER_NODES, "REDIS_CLUSTER_NODES"
        )

        if self.settings.REDIS_OTEL_INSTRUMENTATION_ENABLED:
            self._instrument()

    @staticmethod
    def _instrument() -> None:
        from opentelemetry.instrumentation.redis import RedisInstrumentor

        try:
            RedisInstrumentor().instrument()
            logger.info("Redis OpenTelemetry instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to enable Redis OpenTelemetry instrumentation: {e}")

    @property
    def topology(self) -> Topology:
        if self.settings.REDIS_SENTINEL_ENABLED:
            return Topology.SENTINEL
        if self.settings.REDIS_CLUSTER_ENABLED:
            return Topology.CLUSTER
        return Topology.STANDALONE

    def _connection_kwargs(self) -> Dict[str, Any]:
        return {
            "password": self.settings.redis_password,
            "encoding": "utf-8",
            "decode_responses": True,
            "socket_connect_timeout": self.settings.REDIS_CONNECTION_TIMEOUT,
            "socket_timeout": self.settings.REDIS_OPERATION_TIMEOUT,
        }

    def create_client(self) -> RedisClient:
        """Create the client for the configured topology, once."""
        if self._client is not None:
            return self._client

        topology = self.topology
        if topology is Topology.SENTINEL:
            self._client = self._sentinel_client()
        elif topology is Topology.CLUSTER:
            self._client = self._cluster_client()
        else:
            self._client = self._standalone_client()

        logger.info(
            f"Redis client created for {topology.value} topology",
            extra={
                "topology": topology.value,
                "max_connections": self.pool_config.max_total,
            },
        )
        return self._client

    def create_backend(self) -> RedisCacheBackend:
        return RedisCacheBackend(self.create_client())

    def _standalone_client(self) -> Redis:
        pool = ConnectionPool(
            host=self.settings.REDIS_HOST,
            port=self.settings.REDIS_PORT,
            db=self.settings.REDIS_DATABASE,
            max_connections=self.pool_config.max_total,
            **self._connection_kwargs(),
        )
        return Redis(connection_pool=pool)

    def _cluster_client(self) -> RedisCluster:
        # Cluster mode only has database 0
        return RedisCluster(
            startup_nodes=[ClusterNode(host, port) for host, port in self._cluster_nodes],
            max_connections=self.pool_config.max_total,
            cluster_error_retry_attempts=self.settings.REDIS_CLUSTER_MAX_REDIRECTS,
            **self._connection_kwargs(),
        )

    def _sentinel_client(self) -> Redis:
        self._sentinel = Sentinel(
            self._sentinel_nodes,
            db=self.settings.REDIS_DATABASE,
            **self._connection_kwargs(),
        )
        return self._sentinel.master_for(
            self.settings.REDIS_SENTINEL_MASTER,
            max_connections=self.pool_config.max_total,
        )

    async def health_check(self) -> Dict[str, Any]:
        """
        Ping the backend.

        Returns:
            Health status with topology and round-trip time
        """
        health_status: Dict[str, Any] = {
            "status": "unhealthy",
            "timestamp": time.time(),
            "topology": self.topology.value,
            "pool": {
                "max_total": self.pool_config.max_total,
                "min_idle": self.pool_config.min_idle,
                "max_idle": self.pool_config.max_idle,
            },
        }

        try:
            client = self.create_client()
            start_time = time.time()
            await client.ping()
            health_status["status"] = "healthy"
            health_status["response_time_ms"] = round(
                (time.time() - start_time) * 1000, 2
            )
        except Exception as e:
            health_status["error"] = str(e)
            logger.error(f"Redis health check failed: {e}")

        return health_status

    async def close(self) -> None:
        """Close the shared client, its pool and any sentinel connections."""
        if self._client is None:
            return
        try:
            await self._client.aclose()
            if self._sentinel is not None:
                for node in self._sentinel.sentinels:
                    await node.aclose()
            logger.info("Redis client closed")
        finally:
            self._client = None
            self._sentinel = None
