# Supabase tables: posts
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

posts:
- id: uuid (primary key)
- group_id: uuid (foreign key to groups.id, not null, on delete cascade)
- event_id: uuid (foreign key to events.id, nullable, on delete cascade)
- user_id: uuid (foreign key to user_profiles.id, not null, on delete cascade) - author
- content: text (not null)
- created_at: timestamp (default: now())

A post with event_id null belongs to the group feed; otherwise to that
event's feed. The event must belong to the same group.
"""
