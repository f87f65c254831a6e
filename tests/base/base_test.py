"""Base test class providing common functionality for all tests."""

import logging
import os
import sys
import time
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))


class BaseTest:
    """Base test class with common functionality for all tests."""

    def setup_method(self):
        """Standard setup method called before each test."""
        self.setup_test_logging()
        self.test_start_time = time.time()

    def teardown_method(self):
        """Standard teardown method called after each test."""
        test_duration = time.time() - self.test_start_time
        logging.debug(f"Test completed in {test_duration:.3f}s")

    def setup_test_logging(self):
        """Configure logging for test environment."""
        log_level = os.getenv('TEST_LOG_LEVEL', 'WARNING')
        logging.basicConfig(
            level=getattr(logging, log_level),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=[logging.StreamHandler()]
        )
