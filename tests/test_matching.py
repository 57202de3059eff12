"""
Tests for buddy matching: profile validation, ranking, storage and lifecycle.
"""

import copy

import pytest
from unittest.mock import patch
from sqlalchemy.exc import SQLAlchemyError

from studymate.models import db, BuddyMatch
from studymate.services.matching import matching_service, parse_profile
from studymate.utils.error_handlers import AIServiceError, NotFoundError, ValidationError


class TestParseProfile:

    def test_valid_profile(self, match_profile):
        profile = parse_profile(match_profile)
        assert profile.user_id == match_profile['userId']
        assert profile.preferred_subjects == ['mathematics', 'physics']
        assert profile.knowledge_gaps == [('linear algebra', 0.3), ('calculus', 0.7)]

    @pytest.mark.parametrize('mutate, message', [
        (lambda p: p.pop('userId'), 'User ID is required'),
        (lambda p: p.pop('learningPatterns'), 'Learning patterns are required'),
        (lambda p: p['learningPatterns'].update(preferredSubjects='math'),
         'Preferred subjects are required and must be an array'),
        (lambda p: p['learningPatterns'].pop('studyStyle'), 'Study style is required'),
        (lambda p: p['learningPatterns'].pop('availability'), 'Availability is required'),
        (lambda p: p['learningPatterns'].pop('experienceLevel'), 'Experience level is required'),
        (lambda p: p.pop('knowledgeGaps'), 'Knowledge gaps are required and must be an array'),
        (lambda p: p['knowledgeGaps'].append({'topic': '', 'confidence': 0.2}),
         'Each knowledge gap must have a topic string'),
        (lambda p: p['knowledgeGaps'].append({'topic': 'x', 'confidence': 2}),
         'Each knowledge gap must have a confidence number between 0 and 1'),
    ])
    def test_invalid_profiles(self, match_profile, mutate, message):
        profile = copy.deepcopy(match_profile)
        mutate(profile)
        with pytest.raises(ValidationError) as exc:
            parse_profile(profile)
        assert exc.value.message == message

    def test_empty_knowledge_gaps_allowed(self, match_profile):
        match_profile['knowledgeGaps'] = []
        assert parse_profile(match_profile).knowledge_gaps == []


class TestMatchingService:

    def test_ranked_matches(self, match_profile, study_partners):
        close, partial, distant = study_partners
        result = matching_service.find_matches(match_profile)

        matches = result['matches']
        assert [m['userId'] for m in matches] == [close.id, partial.id]
        assert matches[0]['compatibilityScore'] == pytest.approx(1.0)
        assert matches[1]['compatibilityScore'] == pytest.approx(0.475)
        assert matches[0]['commonTopics'] == ['mathematics', 'physics', 'linear algebra']
        assert matches[0]['learningStyle'] == 'visual'
        assert matches[1]['availability'] == 'flexible'
        assert all(m['status'] == 'pending' for m in matches)
        assert all(m['matchId'] for m in matches)
        assert matches[0]['suggestedActivities'][:2] == [
            'Study mathematics together', 'Work on mathematics problems']
        assert len(matches[0]['suggestedActivities']) <= 5

        assert result['suggestedTopics'][0]['topic'] == 'linear algebra'

    def test_unknown_requester(self, match_profile, db_session):
        match_profile['userId'] = 999
        with pytest.raises(NotFoundError):
            matching_service.find_matches(match_profile)

    def test_no_other_users(self, match_profile):
        result = matching_service.find_matches(match_profile)
        assert result['matches'] == []
        assert isinstance(result['suggestedTopics'], list)

    def test_rerun_updates_existing_rows(self, match_profile, study_partners):
        first = matching_service.find_matches(match_profile)['matches']
        second = matching_service.find_matches(match_profile)['matches']
        assert [m['matchId'] for m in first] == [m['matchId'] for m in second]
        assert BuddyMatch.query.count() == 2

    def test_ai_failures_fall_back(self, match_profile, study_partners):
        with patch('studymate.services.matching.ai_client.generate_study_activities',
                   side_effect=AIServiceError()), \
             patch('studymate.services.matching.ai_client.generate_discussion_topics',
                   side_effect=AIServiceError()):
            result = matching_service.find_matches(match_profile)

        assert result['matches'][0]['suggestedActivities'] == [
            'Study mathematics together', 'Work on mathematics problems',
            'Schedule regular study sessions', 'Share study resources and notes']
        assert result['suggestedTopics'] == [
            {'topic': 'Latest developments in mathematics', 'reason': "You're interested in mathematics"},
            {'topic': 'Latest developments in physics', 'reason': "You're interested in physics"},
        ]

    def test_storage_failure_does_not_fail_request(self, match_profile, study_partners):
        with patch('studymate.services.matching.BuddyMatch.query') as mock_query:
            mock_query.filter.side_effect = SQLAlchemyError('disk full')
            result = matching_service.find_matches(match_profile)

        assert len(result['matches']) == 2
        assert all(m['matchId'] is None for m in result['matches'])
        assert BuddyMatch.query.count() == 0

    def test_user_matches_from_both_sides(self, match_profile, study_partners, test_user):
        close = study_partners[0]
        matching_service.find_matches(match_profile)

        mine = matching_service.get_user_matches(test_user.id)
        assert [m['userId'] for m in mine] == [close.id, study_partners[1].id]
        scores = [m['compatibilityScore'] for m in mine]
        assert scores == sorted(scores, reverse=True)

        theirs = matching_service.get_user_matches(close.id)
        assert [m['userId'] for m in theirs] == [test_user.id]
        assert theirs[0]['name'] == test_user.name
        assert theirs[0]['learningStyle'] == 'visual'

    def test_both_users_searching_share_one_match(self, match_profile, study_partners, test_user):
        close = study_partners[0]
        mine = matching_service.find_matches(match_profile)['matches']

        close_profile = copy.deepcopy(match_profile)
        close_profile['userId'] = close.id
        theirs = matching_service.find_matches(close_profile)['matches']

        my_ids = [m['userId'] for m in matching_service.get_user_matches(test_user.id)]
        assert my_ids.count(close.id) == 1
        their_ids = [m['userId'] for m in matching_service.get_user_matches(close.id)]
        assert their_ids.count(test_user.id) == 1

        match_id = next(m['matchId'] for m in mine if m['userId'] == close.id)
        assert next(m['matchId'] for m in theirs if m['userId'] == test_user.id) == match_id
        row = db.session.get(BuddyMatch, match_id)
        assert (row.user_id1, row.user_id2) == (test_user.id, close.id)

    def test_update_status(self, match_profile, study_partners, test_user):
        match_id = matching_service.find_matches(match_profile)['matches'][0]['matchId']

        updated = matching_service.update_match_status(match_id, 'accepted', test_user.id)
        assert updated.status == 'accepted'
        # Either side of the pair may update it
        updated = matching_service.update_match_status(match_id, 'active', study_partners[0].id)
        assert updated.status == 'active'
        assert matching_service.update_match_status(9999, 'accepted', test_user.id) is None
        with pytest.raises(ValidationError):
            matching_service.update_match_status(match_id, 'pending', test_user.id)
        with pytest.raises(ValidationError):
            matching_service.update_match_status(None, 'accepted', test_user.id)

    def test_update_status_by_outsider(self, match_profile, study_partners, test_user):
        distant = study_partners[2]
        match_id = matching_service.find_matches(match_profile)['matches'][0]['matchId']

        assert matching_service.update_match_status(match_id, 'rejected', distant.id) is None
        assert db.session.get(BuddyMatch, match_id).status == 'pending'


class TestMatchEndpoint:

    def test_post_returns_sorted_matches(self, client, match_profile, study_partners):
        response = client.post('/api/match', json=match_profile)
        assert response.status_code == 200
        data = response.get_json()
        scores = [m['compatibilityScore'] for m in data['matches']]
        assert scores == sorted(scores, reverse=True)
        for match in data['matches']:
            for key in ('userId', 'compatibilityScore', 'commonTopics', 'learningStyle', 'availability'):
                assert key in match
        for topic in data['suggestedTopics']:
            assert isinstance(topic['topic'], str)
            assert isinstance(topic['reason'], str)

    def test_post_empty_profile(self, client, db_session):
        response = client.post('/api/match', json={})
        assert response.status_code == 400
        assert 'error' in response.get_json()

    def test_post_missing_learning_patterns(self, client, test_user):
        response = client.post('/api/match', json={'userId': test_user.id})
        assert response.status_code == 400
        assert response.get_json() == {'error': 'Learning patterns are required'}

    def test_post_malformed_json(self, client, db_session):
        response = client.post('/api/match', data='invalid json', content_type='application/json')
        assert response.status_code == 400

    def test_get_requires_user(self, client, db_session):
        response = client.get('/api/match')
        assert response.status_code == 400
        assert response.get_json() == {'error': 'User ID is required'}

    def test_get_and_put(self, client, match_profile, study_partners, test_user):
        client.post('/api/match', json=match_profile)
        matches = client.get(f'/api/match?userId={test_user.id}').get_json()['matches']
        assert len(matches) == 2

        match_id = matches[0]['matchId']
        response = client.put(f'/api/match?matchId={match_id}&status=active&userId={test_user.id}')
        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['status'] == 'active'
        assert data['match']['status'] == 'active'

        response = client.put('/api/match', json={'matchId': match_id, 'status': 'rejected',
                                                  'userId': study_partners[0].id})
        assert response.get_json()['status'] == 'rejected'

    def test_put_by_outsider_is_not_found(self, client, match_profile, study_partners):
        match_id = client.post('/api/match', json=match_profile).get_json()['matches'][0]['matchId']
        response = client.put('/api/match', json={'matchId': match_id, 'status': 'accepted',
                                                  'userId': study_partners[2].id})
        assert response.status_code == 404
        assert response.get_json() == {'error': 'Match not found'}

    def test_put_errors(self, client, test_user):
        base = f'/api/match?userId={test_user.id}'
        assert client.put(f'{base}&status=accepted').get_json() == {'error': 'Match ID is required'}
        response = client.put(f'{base}&matchId=1&status=bogus')
        assert response.status_code == 400
        assert response.get_json() == {
            'error': 'Valid status is required (accepted, rejected, or active)'}
        response = client.put(f'{base}&matchId=9999&status=accepted')
        assert response.status_code == 404
        assert response.get_json() == {'error': 'Match not found'}
        assert client.put('/api/match?matchId=1&status=accepted').get_json() == {
            'error': 'User ID is required'}
