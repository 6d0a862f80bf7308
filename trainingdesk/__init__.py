"""TrainingDesk Backend.

Administrative platform for training courses, enrollments, centers and
companies, including the enrollment report export pipeline.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
