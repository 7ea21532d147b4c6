from datetime import datetime, timezone

import pytest

from buildinfo.core.exceptions import InvalidArgumentError, MalformedInputError
from buildinfo.features.tag.version import (
    FIELD_SELECTORS,
    TagState,
    TagVersion,
    is_template,
    render_fields,
    render_template,
)


class FakeDetails:
    """Records how often tag details are fetched."""

    def __init__(self, revision="abc1234", time=None):
        self.revision = revision
        self.time = time or datetime(2020, 6, 16, 19, 53, tzinfo=timezone.utc)
        self.calls: list[str] = []

    async def __call__(self, tag: str):
        self.calls.append(tag)
        return self.revision, self.time


@pytest.fixture
def details() -> FakeDetails:
    return FakeDetails()


def _state(tag: str, details: FakeDetails) -> TagState:
    return TagState(TagVersion.parse(tag), details)


class TestTagVersion:
    def test_components(self):
        v = TagVersion.parse("v1.2.3")

        assert v.original == "v1.2.3"
        assert v.full == "1.2.3"
        assert v.version == "1.2.3"
        assert v.major_minor == "1.2"
        assert (v.major, v.minor, v.patch) == (1, 2, 3)
        assert v.prerelease == ""
        assert v.metadata == ""

    def test_prerelease_and_metadata(self):
        v = TagVersion.parse("1.2.3-rc.1+build.5")

        assert v.version == "1.2.3"
        assert v.prerelease == "rc1"
        assert v.metadata == "build.5"
        assert v.full == "1.2.3rc1+build.5"

    def test_short_version_pads_patch(self):
        v = TagVersion.parse("v1.2")

        assert v.version == "1.2.0"

    def test_increments(self):
        v = TagVersion.parse("v1.2.3")

        assert v.inc_major() == "2.0.0"
        assert v.inc_minor() == "1.3.0"
        assert v.inc_patch() == "1.2.4"

    def test_patch_increment_of_prerelease_is_its_release(self):
        assert TagVersion.parse("1.2.3-beta.2").inc_patch() == "1.2.3"

    @pytest.mark.parametrize("tag", ["", "latest", "release-2024-x"])
    def test_invalid_tag(self, tag):
        with pytest.raises(MalformedInputError, match="invalid version tag"):
            TagVersion.parse(tag)


class TestTagState:
    @pytest.mark.asyncio
    async def test_details_are_fetched_once(self, details):
        state = _state("v1.2.3", details)

        assert await state.revision() == "abc1234"
        assert await state.time() == details.time
        assert await state.revision() == "abc1234"
        assert details.calls == ["v1.2.3"]

    @pytest.mark.asyncio
    async def test_details_are_not_fetched_eagerly(self, details):
        _state("v1.2.3", details)

        assert details.calls == []


class TestRenderFields:
    @pytest.mark.asyncio
    async def test_major_minor_patch(self, details):
        out = await render_fields(_state("v1.2.3", details), ["major", "minor", "patch"])

        assert out == "1 2 3"
        assert details.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "arg, expected",
        [
            ("original", "v1.2.3"),
            ("full", "1.2.3"),
            ("version", "1.2.3"),
            ("major.minor.patch", "1.2.3"),
            ("major.minor", "1.2"),
            ("+major", "2.0.0"),
            ("+minor", "1.3.0"),
            ("+patch", "1.2.4"),
            ("revision", "abc1234"),
            ("rev", "abc1234"),
            ("time", "2020-06-16T19:53:00Z"),
            ("MAJOR", "1"),
        ],
    )
    async def test_selector(self, details, arg, expected):
        assert await render_fields(_state("v1.2.3", details), [arg]) == expected

    @pytest.mark.asyncio
    async def test_preserves_order_and_fetches_details_once(self, details):
        out = await render_fields(
            _state("v1.2.3", details), ["time", "version", "rev", "revision"]
        )

        assert out == "2020-06-16T19:53:00Z 1.2.3 abc1234 abc1234"
        assert details.calls == ["v1.2.3"]

    @pytest.mark.asyncio
    async def test_skips_empty_arguments(self, details):
        out = await render_fields(_state("v1.2.3", details), ["major", "", "patch"])

        assert out == "1 3"

    @pytest.mark.asyncio
    async def test_unknown_selector_fails_before_resolving(self, details):
        with pytest.raises(InvalidArgumentError, match="Invalid argument `bogus`"):
            await render_fields(_state("v1.2.3", details), ["revision", "bogus"])

        assert details.calls == []

    def test_all_documented_selectors_exist(self):
        assert set(FIELD_SELECTORS) == {
            "original",
            "full",
            "version",
            "major.minor.patch",
            "major.minor",
            "major",
            "minor",
            "patch",
            "+major",
            "+minor",
            "+patch",
            "revision",
            "rev",
            "time",
        }


class TestRenderTemplate:
    @pytest.mark.parametrize(
        "arg, expected",
        [("v{{ major }}", True), ("{{ major }", False), ("major", False)],
    )
    def test_is_template(self, arg, expected):
        assert is_template(arg) is expected

    @pytest.mark.asyncio
    async def test_version_fields(self, details):
        out = await render_template(
            _state("v1.2.3", details), "v{{ major }}.{{ minor }} -> {{ inc_minor }}"
        )

        assert out == "v1.2 -> 1.3.0"
        assert details.calls == []

    @pytest.mark.asyncio
    async def test_details_fetched_when_used(self, details):
        out = await render_template(
            _state("v1.2.3", details), "{{ original }}@{{ revision }} {{ time }}"
        )

        assert out == "v1.2.3@abc1234 2020-06-16T19:53:00Z"
        assert details.calls == ["v1.2.3"]

    @pytest.mark.asyncio
    async def test_unknown_variable(self, details):
        with pytest.raises(MalformedInputError, match="cannot render"):
            await render_template(_state("v1.2.3", details), "{{ nope }}")

    @pytest.mark.asyncio
    async def test_syntax_error(self, details):
        with pytest.raises(MalformedInputError, match="invalid template"):
            await render_template(_state("v1.2.3", details), "{{ major }")
