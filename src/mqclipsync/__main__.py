"""Allow running as ``python -m mqclipsync``."""
from mqclipsync.main import main

main()
