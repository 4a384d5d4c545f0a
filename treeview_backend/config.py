"""Tree view backend configuration."""

from __future__ import annotations

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from treeview_core.layout import (
    DEFAULT_ORIGIN_X,
    DEFAULT_ORIGIN_Y,
    HORIZONTAL_SPACING,
    VERTICAL_SPACING,
    LayoutConfig,
    UnreachedPolicy,
)

DEFAULT_VIEWPORT = {"x": 200, "y": 70, "zoom": 0.8}


class Settings(BaseSettings):
    """Environment-driven settings (TREEVIEW_* variables)."""

    model_config = SettingsConfigDict(env_prefix="TREEVIEW_")

    # Path or http(s) URL of the YAML graph description
    data_source: str = "graph-data.yaml"
    title: str = "Maniac by Benjamin Labatut"

    host: str = "127.0.0.1"
    port: int = 8765
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]
    log_level: str = "INFO"

    # Layout
    root_id: Optional[str] = None
    unreached: UnreachedPolicy = UnreachedPolicy.DROP
    horizontal_spacing: float = HORIZONTAL_SPACING
    vertical_spacing: float = VERTICAL_SPACING
    origin_x: float = DEFAULT_ORIGIN_X
    origin_y: float = DEFAULT_ORIGIN_Y

    def layout_config(self) -> LayoutConfig:
        return LayoutConfig(
            horizontal_spacing=self.horizontal_spacing,
            vertical_spacing=self.vertical_spacing,
            origin_x=self.origin_x,
            origin_y=self.origin_y,
            root_id=self.root_id,
            unreached=self.unreached,
        )
