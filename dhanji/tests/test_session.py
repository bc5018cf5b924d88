import unittest
from unittest.mock import MagicMock

from dhanji.core.notifications import DESTRUCTIVE, Notifier
from dhanji.core.session import INITIAL_SESSION, SIGNED_IN, SIGNED_OUT, AuthSession, profile_from_auth_user


def auth_user(id="user-1", name="Asha", email="asha@example.com", avatar=None):
    metadata = {"name": name} if name else {}
    if avatar:
        metadata["avatar_url"] = avatar
    return MagicMock(id=id, email=email, user_metadata=metadata)


class TestNotifier(unittest.TestCase):
    def test_history_and_listeners(self):
        notifier = Notifier()
        received = []
        unsubscribe = notifier.subscribe(received.append)

        notifier.notify("Transaction Added", "Expense of ₹100 added successfully.")
        notifier.error("Failed to load budgets")
        unsubscribe()
        notifier.notify("Ignored")

        self.assertEqual([n.title for n in received], ["Transaction Added", "Failed to load budgets"])
        self.assertEqual(len(notifier.history), 3)
        self.assertEqual(received[1].variant, DESTRUCTIVE)
        self.assertEqual(received[1].description, "Please try again later.")
        self.assertFalse(received[0].is_error)

    def test_clear(self):
        notifier = Notifier()
        self.assertIsNone(notifier.last)
        notifier.notify("Hello")
        notifier.clear()
        self.assertIsNone(notifier.last)


class TestProfileFromAuthUser(unittest.TestCase):
    def test_mapping(self):
        profile = profile_from_auth_user(auth_user(avatar="https://example.com/a.png"))
        self.assertEqual(profile.id, "user-1")
        self.assertEqual(profile.name, "Asha")
        self.assertEqual(profile.avatar, "https://example.com/a.png")
        self.assertEqual(profile.settings.theme, "system")
        self.assertTrue(profile.settings.email_notifications)

    def test_missing_name(self):
        profile = profile_from_auth_user(auth_user(name=None, email=None))
        self.assertEqual(profile.name, "User")
        self.assertEqual(profile.email, "")


class TestAuthSession(unittest.TestCase):
    def setUp(self):
        self.mock_supabase_client = MagicMock()
        self.mock_supabase_client.auth.get_session.return_value = None
        self.notifier = Notifier()
        self.session = AuthSession(self.mock_supabase_client, self.notifier)
        self.events = []
        self.session.subscribe(lambda event, user: self.events.append((event, user and user.id)))

    def test_start_without_session(self):
        self.assertTrue(self.session.is_loading)
        self.assertIsNone(self.session.start())
        self.assertFalse(self.session.is_loading)
        self.assertFalse(self.session.is_authenticated)
        self.mock_supabase_client.auth.on_auth_state_change.assert_called_once()
        self.assertEqual(self.events, [])

    def test_start_restores_existing_session(self):
        self.mock_supabase_client.auth.get_session.return_value = MagicMock(user=auth_user())
        user = self.session.start()
        self.assertEqual(user.id, "user-1")
        self.assertEqual(self.events, [(INITIAL_SESSION, "user-1")])

    def test_login_success(self):
        self.mock_supabase_client.auth.sign_in_with_password.return_value = MagicMock(
            session=MagicMock(user=auth_user()))
        self.assertTrue(self.session.login("asha@example.com", "s3cretpass"))

        self.mock_supabase_client.auth.sign_in_with_password.assert_called_once_with(
            {"email": "asha@example.com", "password": "s3cretpass"})
        self.assertEqual(self.session.user_id, "user-1")
        self.assertEqual(self.events, [(SIGNED_IN, "user-1")])
        self.assertEqual(self.notifier.last.title, "Login Successful")

    def test_login_failure(self):
        self.mock_supabase_client.auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")
        self.assertFalse(self.session.login("asha@example.com", "wrong"))
        self.assertFalse(self.session.is_authenticated)
        self.assertFalse(self.session.is_loading)
        self.assertEqual(self.session.error, "Invalid login credentials")
        self.assertEqual(self.notifier.last.title, "Login Failed")
        self.assertTrue(self.notifier.last.is_error)

    def test_signup_sends_name(self):
        self.mock_supabase_client.auth.sign_up.return_value = MagicMock(session=None)
        self.assertTrue(self.session.signup("Asha", "asha@example.com", "s3cretpass"))
        args, _ = self.mock_supabase_client.auth.sign_up.call_args
        self.assertEqual(args[0]["options"], {"data": {"name": "Asha"}})
        self.assertFalse(self.session.is_authenticated)
        self.assertEqual(self.notifier.last.title, "Account Created")

    def test_signup_failure(self):
        self.mock_supabase_client.auth.sign_up.side_effect = Exception("User already registered")
        self.assertFalse(self.session.signup("Asha", "asha@example.com", "s3cretpass"))
        self.assertEqual(self.notifier.last.title, "Registration Failed")

    def test_logout(self):
        self.mock_supabase_client.auth.get_session.return_value = MagicMock(user=auth_user())
        self.session.start()
        self.assertTrue(self.session.logout())
        self.assertIsNone(self.session.user)
        self.assertEqual(self.events[-1], (SIGNED_OUT, None))
        self.assertEqual(self.notifier.last.title, "Logged Out")

    def test_backend_events_update_state(self):
        self.session.start()
        callback = self.mock_supabase_client.auth.on_auth_state_change.call_args[0][0]
        callback("SIGNED_IN", MagicMock(user=auth_user(id="user-2")))
        callback("TOKEN_REFRESHED", MagicMock(user=auth_user(id="user-2")))
        callback("SIGNED_OUT", None)
        self.assertEqual(self.events, [("SIGNED_IN", "user-2"), ("SIGNED_OUT", None)])

    def test_close_unsubscribes(self):
        self.session.start()
        subscription = self.mock_supabase_client.auth.on_auth_state_change.return_value
        self.session.close()
        subscription.unsubscribe.assert_called_once()

    def test_verify_otp(self):
        self.assertTrue(self.session.verify_otp("123456"))


if __name__ == "__main__":
    unittest.main()
