"""
Display tags for timeline entries.
"""

from __future__ import annotations

import math

from courseschedule.model import CourseEventRecord, CourseTaskRecord, Tag

TEST_CATEGORIES = {"selfeducation", "test"}
INTERVIEW_CATEGORIES = {"interview", "stage-interview"}
SELF_STUDY_CATEGORY = "self-study"

# Tie-break when two entries start in the same minute. Unlisted tags are equal.
TAG_PRIORITY: dict[Tag, float] = {
    Tag.SELF_STUDY: 1,
    Tag.TEST: 2,
    Tag.CODING: 3,
}


def task_tag(task: CourseTaskRecord) -> Tag:
    category = (task.category or "").strip()
    if category in TEST_CATEGORIES:
        return Tag.TEST
    if category in INTERVIEW_CATEGORIES:
        return Tag.INTERVIEW
    return Tag.CODING


def event_tag(event: CourseEventRecord) -> Tag:
    if (event.category or "").strip() == SELF_STUDY_CATEGORY:
        return Tag.SELF_STUDY
    return Tag.LECTURE


def tag_priority(tag: Tag) -> float:
    return TAG_PRIORITY.get(tag, math.inf)
