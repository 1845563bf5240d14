"""
配置管理模块
使用Pydantic Settings从环境变量加载配置（前缀 HEXFILL_）
"""

import logging
from typing import Literal
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    填充算法配置类
    从环境变量加载配置，支持类型转换和验证
    """

    model_config = SettingsConfigDict(
        env_prefix="HEXFILL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # 未声明的 env 变量忽略，不抛出校验错误
    )

    # 容量估算配置
    estimate_buffer: int = Field(
        12,
        ge=0,
        description="估算结果额外追加的网格数（小多边形靠近二十面体边时的余量）",
    )
    pentagon_area_factor: float = Field(
        0.8,
        gt=0.0,
        le=1.0,
        description="最小网格面积 = 五边形面积 * 该系数",
    )
    radius_margin_factor: float = Field(
        2.0,
        ge=1.0,
        description="外包框外扩距离 = 最大网格半径 * 该系数",
    )
    degenerate_estimate: int = Field(
        1,
        ge=0,
        description="零面积外环的估算结果",
    )

    # 填充配置
    cancel_check_interval: int = Field(
        1024,
        ge=1,
        description="每访问多少个网格检查一次取消回调",
    )
    default_mode: Literal["center", "full", "overlapping", "overlapping_bbox"] = Field(
        "center",
        description="默认包含判定模式",
    )

    # 日志配置
    log_level: str = "WARNING"  # 日志级别


settings = Settings()


def configure_logging(level: str = "") -> None:
    """按配置初始化日志（库本身导入时不配置日志）"""
    level = (level or settings.log_level).upper()
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(name)s - %(message)s'
    )
    # 根日志已有 handler 时 basicConfig 不生效，包日志级别单独设置
    logging.getLogger("hexfill").setLevel(level)
