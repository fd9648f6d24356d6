"""
Hypothesis Strategies for Property-Based Testing

Custom strategies for generating domain objects and test data.
Used by property-based tests to verify universal properties.
"""

import string

from hypothesis import strategies as st

from vidrelay.domain.upload_session.value_objects import MAX_PART_NUMBER, MIN_PART_NUMBER
from vidrelay.domain.video_management import VideoStatus


# =============================================================================
# Primitive Strategies
# =============================================================================

video_statuses = st.sampled_from(list(VideoStatus))

non_terminal_statuses = st.sampled_from(
    [status for status in VideoStatus if not status.is_terminal()]
)

valid_part_numbers = st.integers(min_value=MIN_PART_NUMBER, max_value=MAX_PART_NUMBER)

invalid_part_numbers = st.one_of(
    st.integers(max_value=MIN_PART_NUMBER - 1),
    st.integers(min_value=MAX_PART_NUMBER + 1),
    st.booleans(),
    st.floats(allow_nan=False),
    st.text(max_size=5),
)

video_ids = st.text(alphabet=string.ascii_lowercase + string.digits + "-", min_size=1, max_size=12)

subscriber_handles = st.sampled_from([f"sid-{n}" for n in range(5)])


@st.composite
def safe_file_names(draw) -> str:
    """Generate file names without path separators."""
    stem = draw(st.text(alphabet=string.ascii_letters + string.digits + "_-", min_size=1, max_size=20))
    extension = draw(st.sampled_from(["mp4", "mov", "mkv", "webm"]))
    return f"{stem}.{extension}"


# =============================================================================
# Composite Strategies
# =============================================================================

status_sequences = st.lists(video_statuses, min_size=1, max_size=30)


@st.composite
def registry_operations(draw):
    """Generate a sequence of (operation, handle, video_id) registry calls."""
    channels = st.sampled_from(["v1", "v2", "v3"])
    operation = st.tuples(
        st.sampled_from(["join", "leave_channel", "leave"]),
        subscriber_handles,
        channels,
    )
    return draw(st.lists(operation, max_size=50))


@st.composite
def keyed_work(draw):
    """Generate a list of (key, sequence number) submissions with interleaved keys."""
    keys = draw(st.lists(st.sampled_from(["a", "b", "c", "d"]), min_size=1, max_size=60))
    counters = {}
    work = []
    for key in keys:
        counters[key] = counters.get(key, 0) + 1
        work.append((key, counters[key]))
    return work
