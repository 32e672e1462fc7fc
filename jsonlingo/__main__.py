import sys

from jsonlingo.main import main

sys.exit(main())
