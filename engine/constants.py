from __future__ import annotations

# fraction of the points initially assigned to the train partition
TRAIN_SPLIT_RATIO = 0.7
