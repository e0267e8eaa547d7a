import sys

from credit_pipeline.queue.cli import main

sys.exit(main())
