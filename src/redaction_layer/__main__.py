import sys

from redaction_layer.cli import main

sys.exit(main())
