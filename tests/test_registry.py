"""Tests for Registry and StoreReader."""

import pytest

from gudam import (
    DuplicateKeyError,
    NoSessionError,
    Registry,
    ReservedNameError,
    create_gudam,
    default_registry,
    define_store,
    instantiate,
)


class TestDefine:
    def test_define_registers_without_instantiating(self):
        calls = []
        r = Registry()

        def state():
            calls.append(1)
            return {"n": 0}

        r.define("counter", state)
        assert "counter" in r
        assert len(r) == 1
        assert calls == []

    def test_duplicate_key(self):
        r = Registry()
        r.define("counter", lambda: {"n": 0})
        with pytest.raises(DuplicateKeyError) as info:
            r.define("counter", lambda: {"n": 1})
        assert info.value.key == "counter"
        assert isinstance(info.value, KeyError)
        assert len(r) == 1

    def test_registration_order(self):
        r = Registry()
        for key in ("b", "a", "c"):
            r.define(key, dict)
        assert [d.key for d in r] == ["b", "a", "c"]
        assert list(r.keys()) == ["b", "a", "c"]

    def test_state_must_be_callable(self):
        r = Registry()
        with pytest.raises(TypeError):
            r.define("bad", {"n": 0})
        assert "bad" not in r

    @pytest.mark.parametrize("name", ["reset", "trigger", "preload", "key", "version", "_hidden"])
    def test_reserved_action_names(self, name):
        r = Registry()
        with pytest.raises(ReservedNameError):
            r.define("s", dict, actions={name: lambda store: None})

    def test_getter_and_action_share_name(self):
        r = Registry()
        with pytest.raises(ReservedNameError):
            r.define(
                "s",
                dict,
                getters={"total": lambda store: 0},
                actions={"total": lambda store: 0},
            )

    def test_definition_is_immutable(self):
        r = Registry()
        getters = {"double": lambda store: store.n * 2}
        r.define("counter", lambda: {"n": 0}, getters=getters)
        getters["triple"] = lambda store: store.n * 3
        definition = r.get("counter")
        assert list(definition.getters) == ["double"]
        with pytest.raises(AttributeError):
            definition.key = "other"

    def test_create_gudam_is_independent(self):
        a, b = create_gudam(), create_gudam()
        a.define("x", dict)
        assert "x" not in b


class TestReader:
    def test_reads_from_explicit_channel(self):
        r = Registry()
        use_counter = r.define("counter", lambda: {"n": 0})
        session = r.instantiate()
        assert use_counter(session).n == 0

    def test_reads_from_plain_mapping(self):
        r = Registry()
        use_counter = r.define("counter", lambda: {"n": 0})
        assert use_counter({"counter": "anything"}) == "anything"

    def test_reads_from_ambient_session(self):
        r = Registry()
        use_counter = r.define("counter", lambda: {"n": 5})
        session = r.instantiate()
        with session.provide():
            assert use_counter().n == 5

    def test_no_session(self):
        r = Registry()
        use_counter = r.define("counter", lambda: {"n": 0})
        with pytest.raises(NoSessionError):
            use_counter()

    def test_ambient_session_is_scoped(self):
        r = Registry()
        use_counter = r.define("counter", lambda: {"n": 0})
        with r.instantiate().provide():
            use_counter()
        with pytest.raises(LookupError):
            use_counter()


class TestDefaultRegistry:
    def test_define_store_registers_on_default_registry(self):
        use_theme = define_store("test_registry.theme", lambda: {"mode": "light"})
        assert "test_registry.theme" in default_registry
        session = instantiate()
        assert use_theme(session).mode == "light"
        use_theme(session).mode = "dark"
        assert session["test_registry.theme"].mode == "dark"

    def test_define_store_rejects_duplicates(self):
        define_store("test_registry.once", dict)
        with pytest.raises(DuplicateKeyError):
            define_store("test_registry.once", dict)
