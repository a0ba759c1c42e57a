# Supabase tables: group_members, event_members
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in store.py

"""
Expected Supabase table structure:

group_members:
- id: uuid (primary key)
- group_id: uuid (foreign key to groups.id, not null, on delete cascade)
- user_id: uuid (foreign key to user_profiles.id, not null, on delete cascade)
- role: text (not null, default: 'member') - values: member, admin
- created_at: timestamp (default: now())
- unique constraint on (group_id, user_id)

event_members:
- id: uuid (primary key)
- event_id: uuid (foreign key to events.id, not null, on delete cascade)
- user_id: uuid (foreign key to user_profiles.id, not null, on delete cascade)
- role: text (not null, default: 'attendee') - values: organizer, attendee
- created_at: timestamp (default: now())
- unique constraint on (event_id, user_id)

The unique constraints are the only concurrency guard for membership edges:
an insert either creates the single edge for the pair or fails with 23505.
"""
