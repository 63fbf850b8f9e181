"""Tests for foreground/background, freeze/thaw and destroy."""

import pytest

from browser_tabs.content.lock_icon import LockIcon
from browser_tabs.content.tab import TabState
from browser_tabs.content.view_container import ViewContainer


class TestVisibility:
    def test_new_tab_starts_in_background(self, control):
        tab = control.create_new_tab(url="http://example.com/")
        assert tab.state is TabState.BACKGROUND
        assert tab.web_view.paused == 1
        assert tab.web_view.loaded == ["http://example.com/"]

    def test_foreground_resumes_and_enables_context_menu(self, tab, host):
        assert tab.state is TabState.ACTIVE
        assert tab.web_view.resumed == 1
        assert tab.web_view.context_menu_listener is host.context_menu_listener

    def test_background_pauses_and_disables_context_menu(self, control, tab):
        other = control.create_new_tab()
        control.set_current_tab(other)
        assert tab.state is TabState.BACKGROUND
        assert tab.web_view.context_menu_listener is None
        assert tab.web_view.paused == 2

    def test_sub_window_follows_main_view(self, control, tab):
        tab.create_sub_window()
        sub = tab.sub_web_view
        tab.put_in_background()
        tab.put_in_foreground()
        assert sub.paused == 1
        assert sub.resumed == 1


class TestSubWindow:
    def test_created_once(self, tab):
        assert tab.create_sub_window() is True
        assert tab.create_sub_window() is False
        assert tab.get_top_window() is tab.sub_web_view

    def test_registered_with_settings(self, control, tab):
        tab.create_sub_window()
        assert any(o is tab.sub_web_view.settings for o in control.settings.observers)

    def test_dismiss_releases_view(self, control, tab):
        tab.create_sub_window()
        sub = tab.sub_web_view
        tab.dismiss_sub_window()
        assert tab.sub_web_view is None
        assert sub.destroyed
        assert sub.client is None
        assert all(o is not sub.settings for o in control.settings.observers)

    def test_attach_to_content(self, tab):
        content = ViewContainer("content")
        tab.create_sub_window()
        tab.attach_tab_to_content_view(content)
        assert content.contains(tab.container)
        assert content.contains(tab.sub_web_view)
        assert tab.container.contains(tab.web_view)

        tab.remove_tab_from_content_view(content)
        assert len(content) == 0
        assert not tab.container.contains(tab.web_view)


class TestFreezeThaw:
    def test_freeze_releases_views(self, control, views):
        tab = control.create_new_tab(url="http://example.com/")
        tab.create_sub_window()
        view, sub = tab.web_view, tab.sub_web_view

        assert tab.freeze() is True
        assert tab.state is TabState.FROZEN
        assert tab.web_view is None and tab.sub_web_view is None
        assert view.destroyed and sub.destroyed
        assert control.settings.observers == []
        assert tab.saved_state is not None

    def test_freeze_is_idempotent(self, control):
        tab = control.create_new_tab(url="http://example.com/")
        tab.freeze()
        saved = tab.saved_state
        snapshot = saved.to_dict()

        assert tab.freeze() is True
        assert tab.saved_state is saved
        assert tab.saved_state.to_dict() == snapshot

    def test_freeze_without_history_still_releases(self, control):
        tab = control.create_new_tab(url="http://example.com/")
        tab.web_view.fail_save = True
        # state object is still produced, just without history
        assert tab.freeze() is True
        assert tab.saved_state.history is None

    def test_events_ignored_while_frozen(self, control):
        from browser_tabs.content.events import Event, EventType
        tab = control.create_new_tab(url="http://example.com/")
        view = tab.web_view
        tab.freeze()
        assert tab.client.handle(Event(EventType.PAGE_STARTED, view, url="http://x/")) is False
        assert not tab.in_load

    def test_thaw_restores_history(self, control, views):
        tab = control.create_new_tab(url="http://a.com/")
        tab.web_view.load_url("http://b.com/")
        tab.freeze()

        control.set_current_tab(tab)
        view = tab.web_view
        assert view is views.created[-1]
        assert view.get_url() == "http://b.com/"
        view.go_back()
        assert view.get_url() == "http://a.com/"
        assert tab.saved_state is None
        assert tab.in_foreground

    def test_thaw_in_background_pauses_view(self, control, views):
        tab = control.create_new_tab(url="http://a.com/")
        tab.freeze()
        assert tab.thaw(views()) is True
        assert tab.web_view.paused == 1
        assert tab.state is TabState.BACKGROUND

    def test_thaw_live_tab_is_a_no_op(self, control):
        tab = control.create_new_tab(url="http://a.com/")
        view = tab.web_view
        spare = control.create_web_view()
        assert len(control.settings.observers) == 2

        assert tab.thaw(spare) is False
        assert tab.web_view is view
        assert not view.destroyed
        assert view.get_url() == "http://a.com/"
        assert spare.client is None
        assert len(control.settings.observers) == 2

        control.release_web_view(spare)
        control.remove_tab(tab)
        assert control.settings.observers == []


class TestDestroy:
    def test_destroy_is_idempotent(self, control):
        tab = control.create_new_tab(url="http://example.com/")
        view = tab.web_view
        tab.destroy()
        tab.destroy()
        assert tab.state is TabState.DESTROYED
        assert view.destroyed
        assert tab.freeze() is False

    def test_destroy_hides_geolocation_prompt(self, tab):
        tab.geolocation_prompt.show("http://maps.example", lambda *a: None)
        tab.destroy()
        assert not tab.geolocation_prompt.visible

    def test_swapping_view_hides_geolocation_prompt(self, tab, views):
        tab.geolocation_prompt.show("http://maps.example", lambda *a: None)
        tab.set_web_view(views())
        assert not tab.geolocation_prompt.visible


class TestLockIcon:
    def test_https_page_is_secure(self, tab):
        tab.reset_lock_icon("https://bank.example/")
        assert tab.lock_icon_type is LockIcon.SECURE

    def test_mixed_content(self, tab):
        from browser_tabs.content.events import Event, EventType
        tab.reset_lock_icon("https://bank.example/")
        tab.client.handle(Event(EventType.LOAD_RESOURCE, tab.web_view, url="data:image/png;base64,xx"))
        assert tab.lock_icon_type is LockIcon.SECURE
        tab.client.handle(Event(EventType.LOAD_RESOURCE, tab.web_view, url="http://cdn.example/x.js"))
        assert tab.lock_icon_type is LockIcon.MIXED

    def test_revert_restores_previous(self, tab):
        tab.reset_lock_icon("https://bank.example/")
        tab.reset_lock_icon("http://plain.example/")
        assert tab.previous_lock_icon_type is LockIcon.SECURE
        tab.revert_lock_icon()
        assert tab.lock_icon_type is LockIcon.SECURE


class TestPickerData:
    def test_populate_from_live_view(self, tab):
        tab.web_view.set_title("Example")
        tab.populate_picker_data()
        assert tab.url == "http://example.com/"
        assert tab.title == "Example"

    def test_title_falls_back_to_url(self, tab):
        tab.populate_picker_data()
        assert tab.title == "http://example.com/"

    def test_populate_from_saved_state_when_frozen(self, control):
        tab = control.create_new_tab(url="http://example.com/")
        tab.web_view.set_title("Example")
        tab.freeze()
        tab.clear_picker_data()
        assert tab.url is None

        tab.populate_picker_data()
        assert tab.url == "http://example.com/"
        assert tab.title == "Example"


@pytest.mark.parametrize("foreground", [True, False])
def test_geolocation_prompt_only_in_foreground(control, foreground):
    from browser_tabs.content.events import Event, EventType
    tab = control.create_new_tab(url="http://maps.example/")
    if foreground:
        control.set_current_tab(tab)
    answers = []
    tab.client.handle(Event(EventType.GEOLOCATION_SHOW_PROMPT, tab.web_view,
                            origin="http://maps.example", callback=lambda *a: answers.append(a)))
    assert tab.geolocation_prompt.visible is foreground
    if foreground:
        tab.geolocation_prompt.respond(True, remember=True)
        assert answers == [("http://maps.example", True, True)]
