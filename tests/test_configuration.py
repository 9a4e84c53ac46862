"""Tests for the get/list/set/delete operations."""

import pytest

from stackconf.configuration import (
    delete_config,
    get_config,
    get_symmetric_crypter,
    get_symmetric_decrypter,
    list_config,
    set_config,
)
from stackconf.errors import DecryptionError, IncorrectPassphraseError, KeyNotFoundError
from stackconf.keys import Key
from stackconf.settings import SECRET_MASK
from stackconf.values import Value


def key(name: str) -> Key:
    return Key("proj", "config", name)


def no_crypter():
    raise AssertionError("crypter should not be requested")


class TestSetAndGet:
    """Scoped writes and reads."""

    def test_project_value_round_trip(self, store, saves):
        set_config(store, "", key("foo"), Value.plain("bar"), saves.append)

        assert get_config(store, "", key("foo"), no_crypter) == "bar"
        assert saves == [store]

    def test_stack_overrides_project(self, store, saves):
        set_config(store, "", key("foo"), Value.plain("bar"), saves.append)
        set_config(store, "dev", key("foo"), Value.plain("dev-bar"), saves.append)

        assert get_config(store, "dev", key("foo"), no_crypter) == "dev-bar"
        assert get_config(store, "", key("foo"), no_crypter) == "bar"

    def test_stack_inherits_project_value(self, store, saves):
        set_config(store, "", key("foo"), Value.plain("bar"), saves.append)
        set_config(store, "dev", key("other"), Value.plain("x"), saves.append)

        assert get_config(store, "dev", key("foo"), no_crypter) == "bar"

    def test_repeated_set_updates(self, store, saves):
        set_config(store, "", key("foo"), Value.plain("one"), saves.append)
        set_config(store, "", key("foo"), Value.plain("two"), saves.append)

        assert get_config(store, "", key("foo"), no_crypter) == "two"
        assert len(store.config) == 1

    def test_missing_key_on_empty_store(self, store):
        with pytest.raises(KeyNotFoundError) as exc_info:
            get_config(store, "", key("missing"), no_crypter)

        assert exc_info.value.key == "missing"
        assert "'missing'" in str(exc_info.value)

    def test_missing_key_names_stack(self, store, saves):
        set_config(store, "", key("foo"), Value.plain("bar"), saves.append)

        with pytest.raises(KeyNotFoundError) as exc_info:
            get_config(store, "prod", key("nope"), no_crypter)

        assert str(exc_info.value) == "configuration key 'nope' not found for stack 'prod'"

    def test_foreign_key_keeps_full_name_in_error(self, store):
        with pytest.raises(KeyNotFoundError) as exc_info:
            get_config(store, "", Key("aws", "config", "region"), no_crypter)
        assert exc_info.value.key == "aws:config:region"

    def test_secret_get_uses_crypter(self, store, saves, crypter):
        set_config(store, "", key("token"), Value.encrypted(crypter.encrypt("xyz")), saves.append)

        assert get_config(store, "", key("token"), lambda: crypter) == "xyz"

    def test_secret_get_wraps_decryption_error(self, store, saves, crypter):
        store.writable_config("")[key("token")] = Value.encrypted("v1:bad")

        with pytest.raises(DecryptionError) as exc_info:
            get_config(store, "", key("token"), lambda: crypter)

        assert "token" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, DecryptionError)


class TestDelete:
    """Deletes are scoped and tolerate missing keys."""

    def test_delete_missing_is_noop(self, store, saves):
        delete_config(store, "", key("foo"), saves.append)

        assert store.config is None
        assert store.stacks is None
        assert saves == [store]

    def test_delete_from_unknown_stack(self, store, saves):
        delete_config(store, "dev", key("foo"), saves.append)
        assert store.stacks is None

    def test_delete_only_touches_scope(self, store, saves):
        set_config(store, "", key("foo"), Value.plain("bar"), saves.append)
        set_config(store, "dev", key("foo"), Value.plain("dev-bar"), saves.append)

        delete_config(store, "dev", key("foo"), saves.append)

        assert get_config(store, "dev", key("foo"), no_crypter) == "bar"
        assert store.config == {key("foo"): Value.plain("bar")}


class TestList:
    """Listing, ordering and blinding."""

    def test_empty_when_nothing_set(self, store, saves):
        assert list_config(store, "", False, no_crypter) == []

        set_config(store, "", key("foo"), Value.plain("bar"), saves.append)
        delete_config(store, "", key("foo"), saves.append)

        assert list_config(store, "", False, no_crypter) == []

    def test_sorted_by_qualified_key(self, store, saves):
        for name in ("zeta", "alpha", "mid"):
            set_config(store, "", key(name), Value.plain(name.upper()), saves.append)
        set_config(store, "", Key("aaa", "config", "z"), Value.plain("other"), saves.append)

        rows = list_config(store, "", False, no_crypter)

        assert rows == [
            ("aaa:config:z", "other"),
            ("alpha", "ALPHA"),
            ("mid", "MID"),
            ("zeta", "ZETA"),
        ]

    def test_order_independent_of_insertion(self, store, saves):
        set_config(store, "", key("b"), Value.plain("2"), saves.append)
        set_config(store, "", key("a"), Value.plain("1"), saves.append)
        first = list_config(store, "", False, no_crypter)

        other = type(store)(name="proj")
        set_config(other, "", key("a"), Value.plain("1"), saves.append)
        set_config(other, "", key("b"), Value.plain("2"), saves.append)

        assert list_config(other, "", False, no_crypter) == first

    def test_secrets_blinded_by_default(self, store, saves, crypter):
        set_config(store, "", key("foo"), Value.plain("bar"), saves.append)
        set_config(store, "", key("token"), Value.encrypted(crypter.encrypt("xyz")), saves.append)

        rows = list_config(store, "", False, no_crypter)

        assert rows == [("foo", "bar"), ("token", SECRET_MASK)]

    def test_show_secrets_reveals(self, store, saves, crypter):
        set_config(store, "", key("foo"), Value.plain("bar"), saves.append)
        set_config(store, "", key("token"), Value.encrypted(crypter.encrypt("xyz")), saves.append)

        rows = list_config(store, "", True, lambda: crypter)

        assert rows == [("foo", "bar"), ("token", "xyz")]

    def test_show_secrets_without_secrets_skips_crypter(self, store, saves):
        """No passphrase prompt when there is nothing to reveal."""
        set_config(store, "", key("foo"), Value.plain("bar"), saves.append)

        assert list_config(store, "", True, no_crypter) == [("foo", "bar")]

    def test_stack_listing_merges(self, store, saves):
        set_config(store, "", key("foo"), Value.plain("bar"), saves.append)
        set_config(store, "", key("keep"), Value.plain("k"), saves.append)
        set_config(store, "dev", key("foo"), Value.plain("dev-bar"), saves.append)

        assert list_config(store, "dev", False, no_crypter) == [("foo", "dev-bar"), ("keep", "k")]
        assert list_config(store, "", False, no_crypter) == [("foo", "bar"), ("keep", "k")]

    def test_reads_do_not_save(self, store, saves, crypter):
        store.writable_config("")[key("token")] = Value.encrypted(crypter.encrypt("xyz"))

        list_config(store, "", True, lambda: crypter)
        get_config(store, "", key("token"), lambda: crypter)

        assert saves == []


class TestSymmetricCrypterAcquisition:
    """Passphrase handling and salt initialization."""

    def test_first_use_creates_and_saves_salt(self, store, saves):
        crypter = get_symmetric_crypter(store, saves.append, lambda confirm: "hunter2")

        assert store.encryption_salt
        assert saves == [store]
        assert crypter.decrypt(crypter.encrypt("xyz")) == "xyz"

    def test_existing_salt_not_saved_again(self, store, saves):
        first = get_symmetric_crypter(store, saves.append, lambda confirm: "hunter2")
        ciphertext = first.encrypt("xyz")

        second = get_symmetric_crypter(store, saves.append, lambda confirm: "hunter2")

        assert second.decrypt(ciphertext) == "xyz"
        assert len(saves) == 1

    def test_env_passphrase_skips_prompt(self, store, saves, monkeypatch):
        monkeypatch.setenv("STACKCONF_PASSPHRASE", "hunter2")

        def prompt(confirm):
            raise AssertionError("should not prompt")

        get_symmetric_crypter(store, saves.append, prompt)
        get_symmetric_crypter(store, saves.append, lambda confirm: "hunter2")

    def test_wrong_passphrase(self, store, saves):
        get_symmetric_crypter(store, saves.append, lambda confirm: "hunter2")

        with pytest.raises(IncorrectPassphraseError):
            get_symmetric_crypter(store, saves.append, lambda confirm: "wrong")

    def test_new_salt_confirms_passphrase(self, store, saves):
        asked = []

        def prompt(confirm):
            asked.append(confirm)
            return "hunter2"

        get_symmetric_crypter(store, saves.append, prompt)
        get_symmetric_crypter(store, saves.append, prompt)

        assert asked == [True, False]


class TestSymmetricDecrypterAcquisition:
    """Reads never create a salt or save the project."""

    def test_missing_salt_fails_without_saving(self, store, saves):
        store.writable_config("")[key("token")] = Value.encrypted("v1:a:b")

        def decrypter():
            return get_symmetric_decrypter(store, lambda confirm: "hunter2")

        with pytest.raises(DecryptionError, match="no encryption salt"):
            get_config(store, "", key("token"), decrypter)
        with pytest.raises(DecryptionError, match="no encryption salt"):
            list_config(store, "", True, decrypter)

        assert store.encryption_salt is None
        assert saves == []

    def test_missing_salt_fails_before_prompting(self, store):
        def prompt(confirm):
            raise AssertionError("should not prompt")

        with pytest.raises(DecryptionError):
            get_symmetric_decrypter(store, prompt)

    def test_existing_salt_decrypts(self, store, saves):
        crypter = get_symmetric_crypter(store, saves.append, lambda confirm: "hunter2")
        store.writable_config("")[key("token")] = Value.encrypted(crypter.encrypt("xyz"))

        def decrypter():
            return get_symmetric_decrypter(store, lambda confirm: "hunter2")

        assert get_config(store, "", key("token"), decrypter) == "xyz"
        assert len(saves) == 1
