# Supabase tables: groups (memberships live in group_members, see modules/memberships/models.py)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

groups:
- id: uuid (primary key)
- name: text (not null, unique)
- description: text (nullable)
- privacy: text (not null, default: 'public') - values: public, private
- topics: text[] (not null, default: '{}') - values from GroupTopic
- created_by: uuid (foreign key to user_profiles.id, on delete set null)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

The unique constraint on name decides concurrent create_group calls: exactly
one insert succeeds, the others fail with 23505.
"""
