# Supabase tables: user_profiles, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

user_profiles:
- id: uuid (primary key, references auth.users.id)
- username: text (unique, not null)
- email: text (unique, not null) - synced from auth.users
- avatar_url: text (nullable)
- online: boolean (not null, default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Deleting a profile cascades to group_members, event_members, friendships,
follows and posts through their foreign keys.
"""
