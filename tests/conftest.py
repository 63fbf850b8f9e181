"""Shared fakes and fixtures for the browser_tabs test suite."""

import threading
import time

import pytest
import skia

from browser_tabs.common.errors import BookmarksError
from browser_tabs.content.interfaces import (
    BookmarksStore,
    BrowserHost,
    CookieSync,
    HttpAuthHandler,
    SslErrorHandler,
    WebView,
)
from browser_tabs.content.picker_data import HistoryItem
from browser_tabs.core.tab_control import TabControl
from browser_tabs.profiling import Tracer
from browser_tabs.rendering import encode_image


def make_image(width=8, height=8, color=skia.ColorRED):
    surface = skia.Surface(width, height)
    with surface as canvas:
        canvas.clear(color)
    return surface.makeImageSnapshot()


def make_png(width=8, height=8):
    return encode_image(make_image(width, height))


def run_tasks(runner, count, timeout=5.0):
    """Run tasks on the calling thread until `count` have run or time runs out."""
    deadline = time.monotonic() + timeout
    done = 0
    while done < count and time.monotonic() < deadline:
        if runner.wait_for_task(timeout=0.05):
            done += runner.run_pending()
    return done


# -- Engine view ---------------------------------------------------------------


class FakeViewSettings:
    def __init__(self):
        self.updates = 0

    def update(self, browser_settings):
        self.updates += 1


class FakeWebView(WebView):
    def __init__(self):
        self.settings = FakeViewSettings()
        self.client = None
        self.entries = []
        self.index = -1
        self.original_url = None
        self.loaded = []
        self.resumed = 0
        self.paused = 0
        self.destroyed = False
        self.context_menu_listener = None
        self.network_available = True
        self.accept_restore = True
        self.fail_save = False
        self.has_picture = True
        self.restored_picture = None
        self.credentials = None

    # navigation helpers used by tests
    def set_title(self, title):
        self.entries[self.index]["title"] = title

    def go_back(self):
        if self.index > 0:
            self.index -= 1

    def go_forward(self):
        if self.index < len(self.entries) - 1:
            self.index += 1

    def set_client(self, client):
        self.client = client

    def load_url(self, url):
        self.loaded.append(url)
        if self.original_url is None:
            self.original_url = url
        del self.entries[self.index + 1:]
        self.entries.append({"url": url, "title": None})
        self.index = len(self.entries) - 1

    def get_url(self):
        if self.index < 0:
            return None
        return self.entries[self.index]["url"]

    def get_original_url(self):
        return self.original_url

    def save_state(self):
        if self.fail_save:
            return None
        return {"entries": [dict(e) for e in self.entries], "index": self.index}

    def restore_state(self, history):
        if not self.accept_restore or not history:
            return False
        self.entries = [dict(e) for e in history["entries"]]
        self.index = history["index"]
        return True

    def current_item(self):
        if self.index < 0:
            return None
        entry = self.entries[self.index]
        return HistoryItem(url=entry["url"], title=entry["title"])

    def capture_picture(self):
        return make_image() if self.has_picture else None

    def restore_picture(self, image):
        self.restored_picture = image

    def on_resume(self):
        self.resumed += 1

    def on_pause(self):
        self.paused += 1

    def destroy(self):
        self.destroyed = True

    def set_context_menu_listener(self, listener):
        self.context_menu_listener = listener

    def set_network_available(self, available):
        self.network_available = available

    def get_http_auth_username_password(self, host, realm):
        return self.credentials


class ViewFactory:
    """Creates FakeWebViews and remembers them, in creation order."""

    def __init__(self):
        self.created = []
        self.accept_restore = True

    def __call__(self):
        view = FakeWebView()
        view.accept_restore = self.accept_restore
        self.created.append(view)
        return view


# -- Host window ---------------------------------------------------------------


class FakeHost(BrowserHost):
    def __init__(self):
        self.control = None
        self.context_menu_listener = object()
        self.calls = []
        self.error_dialogs = []
        self.network_up = True
        self.user_stopped = False

    def _record(self, name, *args):
        self.calls.append((name,) + args)

    def called(self, name):
        return [c for c in self.calls if c[0] == name]

    def show_error_dialog(self, title, description, on_dismiss):
        self.error_dialogs.append((title, description, on_dismiss))

    def dismiss_error(self):
        _, _, on_dismiss = self.error_dialogs[-1]
        on_dismiss()

    def show_redirect_dialog(self, on_continue, on_cancel):
        self._record("redirect_dialog", on_continue, on_cancel)

    def show_form_resubmission_dialog(self, on_resend, on_dont_resend):
        self._record("resubmission_dialog", on_resend, on_dont_resend)

    def show_ssl_warnings(self, view, handler, error, warnings, on_cancel):
        self._record("ssl_warnings", handler, warnings, on_cancel)

    def show_http_authentication(self, handler, host, realm):
        self._record("http_auth", handler, host, realm)

    def show_popup_confirmation(self, on_allow, on_block):
        self._record("popup_confirmation", on_allow, on_block)

    def show_too_many_windows_dialog(self, subwindow):
        self._record("too_many_windows", subwindow)

    def on_page_started(self, view, url, favicon):
        self._record("page_started", url)

    def on_page_finished(self, view, url):
        self._record("page_finished", url)

    def on_progress_changed(self, view, progress):
        self._record("progress", progress)

    def set_url_title(self, url, title):
        self._record("url_title", url, title)

    def set_favicon(self, icon):
        self._record("favicon", icon)

    def reset_title_and_revert_lock_icon(self):
        self._record("reset_title")

    def did_user_stop_loading(self):
        return self.user_stopped

    def is_network_up(self):
        return self.network_up

    def schedule_thumbnail_update(self, view):
        self._record("schedule_thumbnail", view)

    def cancel_thumbnail_update(self, view):
        self._record("cancel_thumbnail", view)

    def open_tab_and_show(self, url, close_on_exit, app_id):
        tab = self.control.create_new_tab(close_on_exit, app_id, url)
        if tab is not None:
            self.control.set_current_tab(tab)
        return tab

    def switch_to_tab(self, index):
        self._record("switch_to_tab", index)
        return self.control.set_current_tab(self.control.get_tab(index))

    def close_tab(self, tab):
        self._record("close_tab", tab)
        self.control.remove_tab(tab)


# -- Stores --------------------------------------------------------------------


class FakeBookmarks(BookmarksStore):
    def __init__(self):
        self.rows = {}
        self.visits = []
        self.favicons = []
        self.touch_icons = []
        self.titles = []
        self.fail = False

    def _check(self):
        if self.fail:
            raise BookmarksError("database locked")

    def update_favicon(self, original_url, url, icon):
        self._check()
        self.favicons.append((original_url, url, icon))

    def record_visit(self, url):
        self._check()
        self.visits.append(url)

    def find_bookmark_entries_matching(self, original_url, url):
        return list(self.rows.get(url, []))

    def update_touch_icon(self, rows, icon):
        self.touch_icons.append((rows, icon))

    def update_history_title(self, url_suffix, title):
        self._check()
        self.titles.append((url_suffix, title))

    def get_visited_history(self):
        return list(self.visits)


class FakeCookieSync(CookieSync):
    def __init__(self):
        self.resets = 0
        self.syncs = 0

    def reset_sync(self):
        self.resets += 1

    def sync(self):
        self.syncs += 1


class FakeSslHandler(SslErrorHandler):
    def __init__(self):
        self.proceeded = False
        self.cancelled = False

    def proceed(self):
        self.proceeded = True

    def cancel(self):
        self.cancelled = True


class FakeAuthHandler(HttpAuthHandler):
    def __init__(self, use_stored=False):
        self.use_stored = use_stored
        self.credentials = None
        self.cancelled = False

    def proceed(self, username, password):
        self.credentials = (username, password)

    def cancel(self):
        self.cancelled = True

    def use_http_auth_username_password(self):
        return self.use_stored


class IconServer:
    """fetch_icon stand-in; urls listed in `blocked` wait until released."""

    def __init__(self):
        self.icons = {}
        self.blocked = {}
        self.fetched = []

    def block(self, url):
        self.blocked[url] = threading.Event()

    def release(self, url):
        self.blocked[url].set()

    def __call__(self, url):
        gate = self.blocked.get(url)
        if gate is not None:
            gate.wait(5)
        self.fetched.append(url)
        if url not in self.icons:
            raise IOError(f"404 {url}")
        return self.icons[url]


# -- Fixtures ------------------------------------------------------------------


@pytest.fixture(autouse=True)
def clean_tracer():
    Tracer.get().clear()
    yield


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def bookmarks():
    return FakeBookmarks()


@pytest.fixture
def cookie_sync():
    return FakeCookieSync()


@pytest.fixture
def icon_server():
    return IconServer()


@pytest.fixture
def views():
    return ViewFactory()


@pytest.fixture
def control(host, views, bookmarks, cookie_sync, icon_server, tmp_path):
    control = TabControl(
        host,
        views,
        bookmarks,
        thumbnail_dir=str(tmp_path / "thumbnails"),
        cookie_sync=cookie_sync,
        fetch_icon=icon_server,
    )
    host.control = control
    yield control
    for gate in icon_server.blocked.values():
        gate.set()
    control.destroy()


@pytest.fixture
def tab(control):
    """A foreground tab with one page loaded."""
    tab = control.create_new_tab(url="http://example.com/")
    control.set_current_tab(tab)
    return tab
