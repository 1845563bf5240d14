from typing import Any, Dict, Optional


class HexFillError(Exception):
    """
    填充操作通用异常
    """
    def __init__(
        self,
        message: str,
        code: int = 400,
        payload: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.payload = payload or {}
        super().__init__(self.message)


class InvalidResolution(HexFillError):
    """
    分辨率超出网格支持范围
    """
    def __init__(self, resolution: Any, min_res: int = 0, max_res: int = 15):
        super().__init__(
            message=f"Invalid resolution {resolution!r}, expected an int in [{min_res}, {max_res}]",
            code=422,
            payload={"resolution": resolution, "min": min_res, "max": max_res},
        )


class InvalidContainmentMode(HexFillError):
    """
    未知的包含判定模式
    """
    def __init__(self, mode: Any):
        super().__init__(
            message=f"Invalid containment mode {mode!r}",
            code=422,
            payload={"mode": str(mode)},
        )


class BufferTooSmall(HexFillError):
    """
    发现的网格数量超过调用方提供的输出容量。

    说明调用方分配逻辑有误（容量小于估算上界），不可重试。
    """
    def __init__(self, capacity: int, resolution: int):
        super().__init__(
            message=f"Output capacity {capacity} exceeded at resolution {resolution}",
            code=507,
            payload={"capacity": capacity, "resolution": resolution},
        )


class DegenerateSeed(HexFillError):
    """
    外环无法解析出内部种子点（零面积形状）
    """
    def __init__(self, reason: str = ""):
        super().__init__(
            message="No interior seed point for outer ring",
            code=204,
            payload={"reason": reason},
        )


class FillCancelled(HexFillError):
    """
    前沿扩展过程中收到协作式取消请求
    """
    def __init__(self, visited: int):
        super().__init__(
            message=f"Fill cancelled after visiting {visited} cells",
            code=499,
            payload={"visited": visited},
        )
