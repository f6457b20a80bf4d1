# Allows running with `python -m logic_grid_mystery`
import sys
from .ui.main_window import main

if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        print(f"An unexpected error occurred: {e}", file=sys.stderr)
        sys.exit(1)
