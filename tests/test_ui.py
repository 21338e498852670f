"""
UI tests for the SealedConfig console using Streamlit's AppTest framework.

These tests simulate operator interactions with the console to verify that the
GUI drives the store as expected: first-run setup, listing settings, and saving
a new value through the form.
"""
import os

from streamlit.testing.v1 import AppTest


def test_ui_first_run_creates_configuration(make_store, paths):
    """
    Tests the first-run form: entering a password creates the key file and opens the store.
    """
    store = make_store(prompt=None)

    def render(st_store):
        import gui as gui_module

        gui_module.show_main_app(st_store)

    app = AppTest.from_function(render, args=(store,), default_timeout=15)
    app.run()
    assert any("No key file exists yet" in info.value for info in app.info)

    app.text_input[0].input("secret123")
    app.text_input[1].input("secret123")
    buttons = {btn.label: btn for btn in app.button}
    buttons["Create Configuration"].click().run()

    assert store.is_open
    assert os.path.exists(paths[1])


def test_ui_first_run_rejects_mismatched_passwords(make_store, paths):
    store = make_store(prompt=None)

    def render(st_store):
        import gui as gui_module

        gui_module.show_main_app(st_store)

    app = AppTest.from_function(render, args=(store,), default_timeout=15)
    app.run()
    app.text_input[0].input("secret123")
    app.text_input[1].input("different")
    buttons = {btn.label: btn for btn in app.button}
    buttons["Create Configuration"].click().run()

    assert any("do not match" in err.value for err in app.error)
    assert not store.is_open
    assert not os.path.exists(paths[1])


def test_ui_console_lists_and_saves_settings(store):
    store.set("CLIENT_ID", "12345")

    def render(st_store):
        import gui as gui_module

        gui_module.show_main_app(st_store)

    app = AppTest.from_function(render, args=(store,), default_timeout=15)
    app.run()

    assert any("SealedConfig Console" in md.value for md in app.markdown)
    assert len(app.dataframe) == 1

    app.text_input[0].input("PORT")
    app.text_area[0].input("8080")
    app.checkbox[0].check()
    buttons = {btn.label: btn for btn in app.button}
    buttons["Save Setting"].click().run()

    assert store.get_int("PORT") == 8080
    assert any("Saved PORT" in msg.value for msg in app.success)


def test_ui_unlock_page_warns_about_shared_sessions(store, make_store):
    """
    Tests that the unlock page tells the operator the console is shared by all sessions.
    """
    unopened = make_store()

    def render(st_store):
        import gui as gui_module

        gui_module.show_main_app(st_store)

    app = AppTest.from_function(render, args=(unopened,), default_timeout=15)
    app.run()

    assert any("every browser session" in caption.value for caption in app.caption)
    buttons = {btn.label: btn for btn in app.button}
    buttons["Unlock"].click().run()
    assert unopened.is_open
