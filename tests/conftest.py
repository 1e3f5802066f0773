import sys
from pathlib import Path

import matplotlib

# Add parent directory to path to import the entropymap package without installing it
sys.path.insert(0, str(Path(__file__).parent.parent))

# plots are drawn off-screen; plt.show() is a no-op with this backend
matplotlib.use("Agg")
