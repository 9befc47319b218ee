from .const import ArrayLike, INF
