"""Layout configuration. Persisted under settings.json["layout"] with camelCase keys."""

from typing import Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .constants import (
    DEFAULT_FANOUT_OFFSET,
    DEFAULT_FANOUT_SEP,
    DEFAULT_RANK_SEP,
    DEFAULT_RANK_SEP_LARGE,
    DEFAULT_RANK_SEP_MEDIUM,
    DEFAULT_SIBLING_SEP,
    DEFAULT_SIBLING_SEP_LARGE,
    DEFAULT_SIBLING_SEP_MEDIUM,
    DRAG_EPSILON,
    LARGE_TREE_THRESHOLD,
    MEDIUM_TREE_THRESHOLD,
    SETTLE_DELAY,
    STACK_CELL_SIZE,
    STACK_RATIO,
    VIEWPORT_DEBOUNCE,
)


class LayoutConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    direction: Literal["LR", "TB"] = "LR"
    sibling_sep: float = Field(default=DEFAULT_SIBLING_SEP, alias="siblingSpacing", gt=0)
    sibling_sep_medium: float = Field(default=DEFAULT_SIBLING_SEP_MEDIUM, alias="siblingSpacingMedium", gt=0)
    sibling_sep_large: float = Field(default=DEFAULT_SIBLING_SEP_LARGE, alias="siblingSpacingLarge", gt=0)
    rank_sep: float = Field(default=DEFAULT_RANK_SEP, alias="rankSpacing", gt=0)
    rank_sep_medium: float = Field(default=DEFAULT_RANK_SEP_MEDIUM, alias="rankSpacingMedium", gt=0)
    rank_sep_large: float = Field(default=DEFAULT_RANK_SEP_LARGE, alias="rankSpacingLarge", gt=0)
    medium_threshold: int = Field(default=MEDIUM_TREE_THRESHOLD, alias="mediumThreshold", ge=0)
    large_threshold: int = Field(default=LARGE_TREE_THRESHOLD, alias="largeThreshold", ge=0)

    fanout_offset: float = Field(default=DEFAULT_FANOUT_OFFSET, alias="fanoutOffset")
    fanout_sep: float = Field(default=DEFAULT_FANOUT_SEP, alias="fanoutSpacing", gt=0)

    stack_cell_size: float = Field(default=STACK_CELL_SIZE, alias="stackCellSize", gt=0)
    stack_ratio: float = Field(default=STACK_RATIO, alias="stackRatio", gt=0, le=1)

    drag_epsilon: float = Field(default=DRAG_EPSILON, alias="dragEpsilon", ge=0)
    settle_delay: float = Field(default=SETTLE_DELAY, alias="settleDelay", ge=0)
    viewport_debounce: float = Field(default=VIEWPORT_DEBOUNCE, alias="viewportDebounce", ge=0)

    def spacing_for(self, node_count: int) -> Tuple[float, float]:
        """(sibling_sep, rank_sep) for a free subgraph of node_count nodes."""
        if node_count > self.large_threshold:
            return self.sibling_sep_large, self.rank_sep_large
        if node_count > self.medium_threshold:
            return self.sibling_sep_medium, self.rank_sep_medium
        return self.sibling_sep, self.rank_sep
