"""
habitat_split – Main entry point.

Thin wrapper around actions/plot_species_by_habitat.py so the pipeline can be
run as `python main.py <habitat_A_file> <habitat_B_file> [options]`.
"""

import sys

from actions.plot_species_by_habitat import main


if __name__ == "__main__":
    sys.exit(main())
