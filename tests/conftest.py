"""Shared fixtures: a manual Tk-style scheduler and a fake view geometry."""

import pytest

from scroll_centering import TokenGeometry


class FakeScheduler:
    """Stands in for a Tk widget's after/after_cancel pair with a manual clock."""

    def __init__(self):
        self.now = 0
        self.jobs = {}
        self.next_id = 0

    def after(self, ms, callback):
        self.next_id += 1
        job_id = f"after#{self.next_id}"
        self.jobs[job_id] = (self.now + ms, callback)
        return job_id

    def after_cancel(self, job_id):
        self.jobs.pop(job_id, None)

    @property
    def pending(self):
        return len(self.jobs)

    def delay_of(self, job_id):
        return self.jobs[job_id][0] - self.now

    def advance(self, ms):
        """Moves time forward, firing due jobs in order (jobs may schedule new ones)."""
        target = self.now + ms
        while True:
            due = [(when, job_id) for job_id, (when, _) in self.jobs.items() if when <= target]
            if not due:
                break
            when, job_id = min(due)
            _, callback = self.jobs.pop(job_id)
            self.now = when
            callback()
        self.now = target


class FakeView:
    """Geometry provider with one fixed-height row per token."""

    def __init__(self, viewport_height=600, row_height=40, token_count=0, rendered=True):
        self.viewport_height = viewport_height
        self.row_height = row_height
        self.token_count = token_count
        self.rendered = rendered
        self.active_index = 0
        self.index_source = None
        self.applied = []

    def get_active_token_geometry(self):
        index = self.index_source() if self.index_source else self.active_index
        if not self.rendered or not (0 <= index < self.token_count):
            return None
        return TokenGeometry(index * self.row_height, self.row_height)

    def get_viewport_height(self):
        return self.viewport_height

    def get_content_height(self):
        return self.token_count * self.row_height

    def apply_offset(self, offset):
        self.applied.append(offset)


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def view():
    return FakeView(token_count=50)
