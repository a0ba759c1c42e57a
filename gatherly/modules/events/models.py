# Supabase tables: events (attendance lives in event_members, see modules/memberships/models.py)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

events:
- id: uuid (primary key)
- group_id: uuid (foreign key to groups.id, not null, on delete cascade)
- name: text (not null)
- description: text (nullable)
- date: date (not null)
- time: time (not null)
- location: text (nullable)
- created_by: uuid (foreign key to user_profiles.id, on delete set null)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
