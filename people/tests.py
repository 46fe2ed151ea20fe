# File: people/tests.py
# Version: 1.1.0
# Author: vas
# Modified: 2026-10-19

from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied
from django.test import TestCase

from people.models import Person
from timesheets.identity import actor_for_user, person_actor

User = get_user_model()


class PersonModelTest(TestCase):
    """Person identity and its link to a Django account."""

    def test_names(self):
        person = Person.objects.create(first_name="Dana", last_name="Deputy")
        self.assertEqual(person.display_name, "Dana Deputy")
        self.assertEqual(str(person), "Deputy, Dana")

    def test_uuid_is_generated_and_unique(self):
        a = Person.objects.create(first_name="A", last_name="B")
        b = Person.objects.create(first_name="C", last_name="D")
        self.assertTrue(a.uuid)
        self.assertNotEqual(a.uuid, b.uuid)

    def test_history_and_version(self):
        person = Person.objects.create(first_name="Sam", last_name="Super")
        v1 = person.version
        person.email = "sam@example.org"
        person.save()
        person.refresh_from_db()
        self.assertNotEqual(person.version, v1)
        self.assertEqual(person.history.count(), 2)


class ActorTest(TestCase):

    def test_actor_for_linked_user(self):
        user = User.objects.create_user("dana", email="dana@users.example.org", password="x")
        person = Person.objects.create(first_name="Dana", last_name="Deputy", user=user)
        actor = actor_for_user(user)
        self.assertEqual(actor.id, person.pk)
        self.assertEqual(actor.name, "Dana Deputy")
        self.assertEqual(actor.email, "dana@users.example.org")
        self.assertFalse(actor.is_timesheets_manager)

    def test_unlinked_user_is_refused(self):
        user = User.objects.create_user("nobody", password="x")
        with self.assertRaises(PermissionDenied):
            actor_for_user(user)

    def test_person_actor(self):
        person = Person.objects.create(first_name="Sam", last_name="Super", email="sam@example.org")
        actor = person_actor(person, {"module:timesheets:manager"})
        self.assertEqual((actor.id, actor.email), (person.pk, "sam@example.org"))
        self.assertTrue(actor.is_timesheets_manager)
