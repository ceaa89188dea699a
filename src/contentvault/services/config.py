import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from dotenv import find_dotenv, load_dotenv

from contentvault.database import FileBackend, MemoryBackend, RedisManager, SlotBackend

BACKENDS = ("file", "redis", "memory")


@dataclass(frozen=True)
class RedisConfig:
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    namespace: str = "contentvault"

    @classmethod
    def from_env(cls) -> "RedisConfig":
        namespace = os.getenv("CONTENTVAULT_NAMESPACE", cls.namespace)

        uri = os.getenv("REDIS_URI")
        if uri:
            return cls.from_uri(uri, namespace=namespace)

        host = os.getenv("REDIS_HOST", cls.host)
        port_raw = os.getenv("REDIS_PORT")
        db_raw = os.getenv("REDIS_DB")
        password = os.getenv("REDIS_PASSWORD") or None

        port = int(port_raw) if port_raw else cls.port
        db = int(db_raw) if db_raw else cls.db

        return cls(host=host, port=port, db=db, password=password, namespace=namespace)

    @classmethod
    def from_uri(cls, uri: str, namespace: str = "contentvault") -> "RedisConfig":
        parsed = urlparse(uri)
        if parsed.scheme not in {"redis", "rediss"}:
            raise ValueError(
                f"Unsupported Redis URI scheme: {parsed.scheme!r}")

        host = parsed.hostname or cls.host
        port = parsed.port or cls.port
        password = parsed.password or None
        db_fragment = parsed.path.lstrip("/")
        db = int(db_fragment) if db_fragment else cls.db

        return cls(host=host, port=port, db=db, password=password, namespace=namespace)

    def create_manager(self) -> RedisManager:
        return RedisManager(
            host=self.host,
            port=self.port,
            db=self.db,
            password=self.password,
            namespace=self.namespace,
        )


@dataclass(frozen=True)
class VaultConfig:
    backend: str = "file"
    data_dir: Path = Path.home() / ".contentvault"
    redis: RedisConfig = RedisConfig()
    poll_interval: float = 0.25
    api_host: str = "127.0.0.1"
    api_port: int = 3001

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "VaultConfig":
        load_dotenv(dotenv_path=env_path or find_dotenv(usecwd=True))

        backend = os.getenv("CONTENTVAULT_BACKEND", cls.backend).strip().lower()
        if backend not in BACKENDS:
            raise ValueError(
                f"Unsupported backend {backend!r}, expected one of {', '.join(BACKENDS)}")

        data_dir_raw = os.getenv("CONTENTVAULT_DATA_DIR")
        data_dir = Path(data_dir_raw).expanduser() if data_dir_raw else cls.data_dir
        poll_raw = os.getenv("CONTENTVAULT_POLL_INTERVAL")
        port_raw = os.getenv("CONTENTVAULT_API_PORT")

        return cls(
            backend=backend,
            data_dir=data_dir,
            redis=RedisConfig.from_env(),
            poll_interval=float(poll_raw) if poll_raw else cls.poll_interval,
            api_host=os.getenv("CONTENTVAULT_API_HOST", cls.api_host),
            api_port=int(port_raw) if port_raw else cls.api_port,
        )

    def create_backend(self) -> SlotBackend:
        if self.backend == "redis":
            return self.redis.create_manager()
        if self.backend == "memory":
            return MemoryBackend()
        return FileBackend(self.data_dir)
