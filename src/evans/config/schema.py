"""Configuration schema dataclasses for Evans.

This module defines every configurable knob as a typed dataclass,
providing a single source of truth for default values, types and the
key names used in serialized (TOML) files.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

# Kinds understood by environment binding and decode-time type checks
KIND_STR = "str"
KIND_BOOL = "bool"
KIND_STR_LIST = "list[str]"
KIND_HEADERS = "list[header]"

# section -> serialized key -> kind
SCHEMA: dict[str, dict[str, str]] = {
    "default": {
        "protoPath": KIND_STR_LIST,
        "protoFile": KIND_STR_LIST,
        "package": KIND_STR,
        "service": KIND_STR,
    },
    "meta": {
        "path": KIND_STR,
        "autoUpdate": KIND_BOOL,
        "updateLevel": KIND_STR,
    },
    "repl": {
        "promptFormat": KIND_STR,
        "coloredOutput": KIND_BOOL,
        "showSplashText": KIND_BOOL,
        "splashTextPath": KIND_STR,
    },
    "env": {},
    "server": {
        "host": KIND_STR,
        "port": KIND_STR,
        "reflection": KIND_BOOL,
        "tls": KIND_BOOL,
    },
    "log": {
        "prefix": KIND_STR,
    },
    "request": {
        "header": KIND_HEADERS,
        "web": KIND_BOOL,
    },
    "input": {
        "promptFormat": KIND_STR,
    },
}

DEFAULT_META_PATH = "~/.config/evans/config.toml"
DEFAULT_INPUT_PROMPT_FORMAT = "{ancestor}{name} ({type}) => "
DEFAULT_HEADER_KEY = "grpc-client"
DEFAULT_HEADER_VAL = "evans"


@dataclass
class Header:
    """A single outbound request header. Order within a list matters."""

    key: str = ""
    val: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "val": self.val}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Header:
        return cls(key=data.get("key", ""), val=data.get("val", ""))


def default_headers() -> list[Header]:
    """Headers sent when nothing else is configured."""
    return [Header(DEFAULT_HEADER_KEY, DEFAULT_HEADER_VAL)]


@dataclass
class ServerConfig:
    """Connection target for the gRPC server."""

    host: str = "127.0.0.1"
    port: str = "50051"
    reflection: bool = False
    tls: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "host": self.host,
            "port": self.port,
            "reflection": self.reflection,
            "tls": self.tls,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ServerConfig:
        """Create from dictionary."""
        return cls(
            host=data.get("host", "127.0.0.1"),
            port=data.get("port", "50051"),
            reflection=data.get("reflection", False),
            tls=data.get("tls", False),
        )


@dataclass
class DefaultConfig:
    """Proto search paths and the package/service selected at startup.

    ``proto_path`` and ``proto_file`` default to ``[""]`` so that a freshly
    written config file shows an editable entry. The placeholder is removed
    by :func:`evans.config.merge.setup_config` before anyone reads it.
    """

    proto_path: list[str] = field(default_factory=lambda: [""])
    proto_file: list[str] = field(default_factory=lambda: [""])
    package: str = ""
    service: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "protoPath": list(self.proto_path),
            "protoFile": list(self.proto_file),
            "package": self.package,
            "service": self.service,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DefaultConfig:
        """Create from dictionary."""
        return cls(
            proto_path=list(data.get("protoPath", [""])),
            proto_file=list(data.get("protoFile", [""])),
            package=data.get("package", ""),
            service=data.get("service", ""),
        )


@dataclass
class MetaConfig:
    """Where the persisted config lives and how updates are handled."""

    path: str = DEFAULT_META_PATH
    auto_update: bool = False
    update_level: str = "patch"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "path": self.path,
            "autoUpdate": self.auto_update,
            "updateLevel": self.update_level,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MetaConfig:
        """Create from dictionary."""
        return cls(
            path=data.get("path", DEFAULT_META_PATH),
            auto_update=data.get("autoUpdate", False),
            update_level=data.get("updateLevel", "patch"),
        )


@dataclass
class ReplConfig:
    """Interactive shell settings.

    ``server`` is a back-reference to the owning configuration's
    :class:`ServerConfig`. It is not serialized and is re-linked on setup.
    """

    prompt_format: str = "{package}.{service}@{addr}:{port}"
    colored_output: bool = True
    show_splash_text: bool = True
    splash_text_path: str = ""
    server: Optional[ServerConfig] = field(default=None, repr=False, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (excludes the server back-reference)."""
        return {
            "promptFormat": self.prompt_format,
            "coloredOutput": self.colored_output,
            "showSplashText": self.show_splash_text,
            "splashTextPath": self.splash_text_path,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReplConfig:
        """Create from dictionary."""
        return cls(
            prompt_format=data.get(
                "promptFormat", "{package}.{service}@{addr}:{port}"
            ),
            colored_output=data.get("coloredOutput", True),
            show_splash_text=data.get("showSplashText", True),
            splash_text_path=data.get("splashTextPath", ""),
        )


@dataclass
class EnvConfig:
    """Environment-level view; only carries the server back-reference."""

    server: Optional[ServerConfig] = field(default=None, repr=False, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EnvConfig:
        return cls()


@dataclass
class LogConfig:
    """Logging configuration."""

    prefix: str = "[evans] "

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"prefix": self.prefix}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LogConfig:
        """Create from dictionary."""
        return cls(prefix=data.get("prefix", "[evans] "))


@dataclass
class RequestConfig:
    """Outbound request settings."""

    header: list[Header] = field(default_factory=default_headers)
    web: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "header": [h.to_dict() for h in self.header],
            "web": self.web,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RequestConfig:
        """Create from dictionary."""
        if "header" in data:
            header = [Header.from_dict(h) for h in data["header"]]
        else:
            header = default_headers()
        return cls(header=header, web=data.get("web", False))


@dataclass
class InputConfig:
    """Prompt used when interactively filling request fields."""

    prompt_format: str = DEFAULT_INPUT_PROMPT_FORMAT

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"promptFormat": self.prompt_format}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InputConfig:
        """Create from dictionary."""
        return cls(prompt_format=data.get("promptFormat", DEFAULT_INPUT_PROMPT_FORMAT))


@dataclass
class EvansConfig:
    """Main configuration container for Evans.

    Configuration is resolved from the following sources, lowest priority
    first:
    1. Defaults - built-in values
    2. Environment Variables - EVANS_* prefixed
    3. User Config - ~/.config/evans/config.toml (persisted store)
    4. Local Config - .evans.toml in the current directory or git root

    ``request`` and ``input`` stay ``None`` when a decoded file does not
    contain those sections; setup installs their defaults.
    """

    default: DefaultConfig = field(default_factory=DefaultConfig)
    meta: MetaConfig = field(default_factory=MetaConfig)
    repl: ReplConfig = field(default_factory=ReplConfig)
    env: EnvConfig = field(default_factory=EnvConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log: LogConfig = field(default_factory=LogConfig)
    request: Optional[RequestConfig] = None
    input: Optional[InputConfig] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Sections that are ``None`` are left out, since TOML has no null.
        """
        result: dict[str, Any] = {
            "default": self.default.to_dict(),
            "meta": self.meta.to_dict(),
            "repl": self.repl.to_dict(),
            "env": self.env.to_dict(),
            "server": self.server.to_dict(),
            "log": self.log.to_dict(),
        }
        if self.request is not None:
            result["request"] = self.request.to_dict()
        if self.input is not None:
            result["input"] = self.input.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EvansConfig:
        """Create configuration from dictionary."""
        return cls(
            default=DefaultConfig.from_dict(data.get("default", {})),
            meta=MetaConfig.from_dict(data.get("meta", {})),
            repl=ReplConfig.from_dict(data.get("repl", {})),
            env=EnvConfig.from_dict(data.get("env", {})),
            server=ServerConfig.from_dict(data.get("server", {})),
            log=LogConfig.from_dict(data.get("log", {})),
            request=(
                RequestConfig.from_dict(data["request"]) if "request" in data else None
            ),
            input=InputConfig.from_dict(data["input"]) if "input" in data else None,
        )

    def get_nested(self, key: str, default: Any = None) -> Any:
        """Get a configuration value using dotted serialized keys.

        Args:
            key: Dot-separated key path (e.g., "server.port", "repl.promptFormat")
            default: Default value if key not found

        Returns:
            The configuration value (a dict for whole sections) or default
        """
        obj: Any = self.to_dict()
        for part in key.split("."):
            if isinstance(obj, dict) and part in obj:
                obj = obj[part]
            else:
                return default
        return obj


def get_default_config() -> EvansConfig:
    """Get an EvansConfig with every section populated with defaults.

    This is the template the global configuration starts from, including
    the seeded ``grpc-client`` header and the placeholder proto lists.
    """
    return EvansConfig(request=RequestConfig(), input=InputConfig())
