"""Actions behind the HTTP routes: auth flow, sessions, usage, AI, wallet, admin."""
