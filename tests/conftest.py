import os
import sys

import matplotlib

matplotlib.use("Agg")

# flat layout: make the project modules importable when running from anywhere
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)
