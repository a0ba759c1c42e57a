# Supabase Auth + user_profiles
# Credentials are verified by Supabase Auth (auth.users table); this service
# never sees password hashes or signs tokens itself.

"""
Supabase Auth provides:
- auth.sign_up() - Register new users
- auth.sign_in_with_password() - Authenticate users, returns the bearer token
- auth.get_user() - Verify a bearer token and return the user it was issued to
- auth.sign_out() - End the session

A token stays cryptographically valid after its user is deleted, so the
identity resolver also requires a matching user_profiles row (see
modules/users/models.py) before accepting the principal.
"""
