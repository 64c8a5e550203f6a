import sys

from sora_studio.cli import main

sys.exit(main())
