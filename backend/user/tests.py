from django.test import TestCase
from django.urls import reverse
from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase

from common.exceptions import ConflictError, NotFoundError, ValidationError
from .models import Friendship
from .services import FriendshipService

User = get_user_model()


class FriendshipServiceTests(TestCase):
    def setUp(self):
        self.alice = User.objects.create_user(username='alice', email='alice@example.com', password='password123')
        self.bob = User.objects.create_user(username='bob', email='bob@example.com', password='password123')

    def test_send_request_creates_pending(self):
        """A new request starts out pending and does not make users friends."""
        friendship = FriendshipService.send_request(self.alice, 'bob')

        self.assertEqual(friendship.status, Friendship.Status.PENDING)
        self.assertEqual(friendship.requester, self.alice)
        self.assertFalse(FriendshipService.are_friends(self.alice.id, self.bob.id))

    def test_accepted_friendship_is_symmetric(self):
        """Once accepted, both directions report friendship."""
        friendship = FriendshipService.send_request(self.alice, 'bob')
        FriendshipService.respond(self.bob, friendship.id, 'accepted')

        self.assertTrue(FriendshipService.are_friends(self.alice.id, self.bob.id))
        self.assertTrue(FriendshipService.are_friends(self.bob.id, self.alice.id))

    def test_rejected_request_is_not_friendship(self):
        friendship = FriendshipService.send_request(self.alice, 'bob')
        FriendshipService.respond(self.bob, friendship.id, 'rejected')

        self.assertFalse(FriendshipService.are_friends(self.alice.id, self.bob.id))

    def test_cannot_befriend_self(self):
        with self.assertRaises(ValidationError):
            FriendshipService.send_request(self.alice, 'alice')

    def test_unknown_username(self):
        with self.assertRaises(NotFoundError):
            FriendshipService.send_request(self.alice, 'nobody')

    def test_duplicate_request_in_either_direction(self):
        """A second request between the same pair conflicts and reports the existing status."""
        FriendshipService.send_request(self.alice, 'bob')

        with self.assertRaises(ConflictError) as ctx:
            FriendshipService.send_request(self.bob, 'alice')
        self.assertEqual(ctx.exception.extra['status'], Friendship.Status.PENDING)
        self.assertEqual(Friendship.objects.count(), 1)

    def test_only_addressee_can_respond(self):
        """The requester cannot accept their own request."""
        friendship = FriendshipService.send_request(self.alice, 'bob')

        with self.assertRaises(NotFoundError):
            FriendshipService.respond(self.alice, friendship.id, 'accepted')

    def test_cannot_respond_twice(self):
        friendship = FriendshipService.send_request(self.alice, 'bob')
        FriendshipService.respond(self.bob, friendship.id, 'rejected')

        with self.assertRaises(NotFoundError):
            FriendshipService.respond(self.bob, friendship.id, 'accepted')

    def test_invalid_response_status(self):
        friendship = FriendshipService.send_request(self.alice, 'bob')

        with self.assertRaises(ValidationError):
            FriendshipService.respond(self.bob, friendship.id, 'pending')

    def test_list_friends_describes_other_side(self):
        friendship = FriendshipService.send_request(self.alice, 'bob')
        FriendshipService.respond(self.bob, friendship.id, 'accepted')

        friends = FriendshipService.list_friends(self.bob)
        self.assertEqual(len(friends), 1)
        self.assertEqual(friends[0]['friend_id'], self.alice.id)
        self.assertEqual(friends[0]['friend_username'], 'alice')

    def test_pending_requests_by_direction(self):
        FriendshipService.send_request(self.alice, 'bob')

        received = FriendshipService.pending_requests(self.bob, 'received')
        sent = FriendshipService.pending_requests(self.alice, 'sent')

        self.assertEqual([r['username'] for r in received], ['alice'])
        self.assertEqual([r['username'] for r in sent], ['bob'])
        self.assertEqual(FriendshipService.pending_requests(self.alice, 'received'), [])

        with self.assertRaises(ValidationError):
            FriendshipService.pending_requests(self.alice, 'everything')


class AccountAPITests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(username='existing', email='existing@example.com', password='password123')

    def test_register(self):
        """Registering returns 201 with the new user id."""
        response = self.client.post(
            reverse('user:register'),
            {'username': 'newbie', 'email': 'newbie@example.com', 'password': 'secret123'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(User.objects.filter(id=response.data['userId'], username='newbie').exists())

    def test_register_missing_fields(self):
        response = self.client.post(reverse('user:register'), {'username': 'newbie'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_register_duplicate(self):
        response = self.client.post(
            reverse('user:register'),
            {'username': 'existing', 'email': 'other@example.com', 'password': 'secret123'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_login_returns_tokens(self):
        response = self.client.post(
            reverse('user:login'),
            {'username': 'existing', 'password': 'password123'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('token', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['username'], 'existing')

    def test_login_token_authenticates(self):
        """The issued access token works as a Bearer token."""
        response = self.client.post(
            reverse('user:login'),
            {'username': 'existing', 'password': 'password123'},
            format='json',
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['token']}")

        me = self.client.get(reverse('user:me'))
        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data['id'], self.user.id)

    def test_login_wrong_password(self):
        response = self.client.post(
            reverse('user:login'),
            {'username': 'existing', 'password': 'wrong'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Invalid credentials')

    def test_me_requires_token(self):
        response = self.client.get(reverse('user:me'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn('error', response.data)

    def test_bad_token_rejected(self):
        self.client.credentials(HTTP_AUTHORIZATION="Bearer not-a-token")
        response = self.client.get(reverse('user:me'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class FriendAPITests(APITestCase):
    def setUp(self):
        self.alice = User.objects.create_user(username='alice', email='alice@example.com', password='password123')
        self.bob = User.objects.create_user(username='bob', email='bob@example.com', password='password123')
        self.client.force_authenticate(user=self.alice)

    def test_send_and_accept(self):
        """Full request/accept flow through the API."""
        response = self.client.post(reverse('user:friend-request'), {'friendUsername': 'bob'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        friendship_id = response.data['friendship_id']

        self.client.force_authenticate(user=self.bob)
        url = reverse('user:friend-request-respond', args=[friendship_id])
        response = self.client.put(url, {'status': 'accepted'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.get(reverse('user:friends'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['friend_username'], 'alice')

    def test_duplicate_request_conflict(self):
        self.client.post(reverse('user:friend-request'), {'friendUsername': 'bob'}, format='json')
        response = self.client.post(reverse('user:friend-request'), {'friendUsername': 'bob'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['status'], 'pending')

    def test_request_unknown_user(self):
        response = self.client.post(reverse('user:friend-request'), {'friendUsername': 'ghost'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_list_requests_invalid_type(self):
        response = self.client.get(reverse('user:friend-requests'), {'type': 'all'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_sent_requests(self):
        self.client.post(reverse('user:friend-request'), {'friendUsername': 'bob'}, format='json')

        response = self.client.get(reverse('user:friend-requests'), {'type': 'sent'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['username'], 'bob')
