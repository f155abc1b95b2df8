import sys

from portal_assistant.cli import main

sys.exit(main())
