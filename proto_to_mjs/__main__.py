"""Run the protoc plugin with `python -m proto_to_mjs`"""

# Standard
import sys

# Local
from .plugin import main

sys.exit(main())
