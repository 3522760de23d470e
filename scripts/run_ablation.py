#!/usr/bin/env python3
"""Run the contour extraction ablation over a LiTS label dataset.

Dataset root: --dataset-root, else $LITS_TRAIN_LABEL_DIR, else ~/dataset/train/label.
"""

import sys
from pathlib import Path

# Add src to Python path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from contour_ablation.cli import main


if __name__ == "__main__":
    sys.exit(main())
