"""SkillUp LMS Backend.

Course, batch, enrollment, assignment, scheduling, curriculum and
live-class recording services for the SkillUp learning platform.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
