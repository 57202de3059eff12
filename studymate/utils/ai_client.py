"""
AI client for the chat-completion provider.

Wraps every prompt the application sends to the language model:

1) analyze_content → topics with confidence scores and an overall analysis.
2) generate_cards → question/answer flashcards for a list of topics.
3) generate_study_activities → activity ideas for a matched pair of users.
4) generate_discussion_topics → conversation starters for a study profile.

Each call builds a prompt, sends it through `_complete`, and parses the reply
by extracting the embedded JSON object. When the app is TESTING or no
AI_API_KEY is configured, canned replies with the same shape are returned
instead of calling the provider.
"""

import re
import json
import time
import uuid
import logging
from typing import Dict, Any, List, Optional
from flask import current_app
from openai import OpenAI, OpenAIError

from .error_handlers import AIServiceError
from .prom_metrics import observe_ai_call
from .request_logger import request_logger
from .token_utils import count_tokens

JSON_BLOCK_PATTERN = re.compile(r'\{[\s\S]*\}')

SYSTEM_PROMPT = (
    'You are a learning assistant. Always answer with a single JSON object '
    'matching the format requested by the user, without commentary.'
)


def extract_json_block(text: str) -> Dict[str, Any]:
    """Parse the outermost {...} block embedded in a model reply.

    Raises AIServiceError when the reply holds no JSON object or the block
    does not decode.
    """
    match = JSON_BLOCK_PATTERN.search(text or '')
    if not match:
        raise AIServiceError('AI service returned no JSON payload')
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise AIServiceError(f'AI service returned malformed JSON: {e.msg}') from e
    if not isinstance(data, dict):
        raise AIServiceError('AI service returned an unexpected payload')
    return data


class AIClient:
    """Prompt builder and transport for the chat-completion provider."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def analyze_content(self, content: str,
                        user_assessment: Optional[Dict[str, float]] = None) -> Dict[str, Any]:
        """Extract key topics from `content` and predict which ones the user has not mastered."""
        prompt = (
            'Analyze the following learning content. Extract the key knowledge points '
            'and predict which of them the learner has probably not mastered.\n\n'
            f'Learning content:\n{content}\n\n'
        )
        if user_assessment:
            prompt += f'Learner self-assessment (topic -> confidence 0..1): {json.dumps(user_assessment)}\n\n'
        prompt += (
            'Return JSON in this format:\n'
            '{"topics": [{"topic": "name", "confidence": 0.8, "isBlindSpot": false}], '
            '"analysis": "overall analysis"}'
        )

        data = self._complete('analyze_content', prompt,
                              stub=lambda: self._stub_analysis(user_assessment))
        if not isinstance(data.get('topics'), list):
            raise AIServiceError('AI analysis response is missing topics')
        data.setdefault('analysis', '')
        return data

    def generate_cards(self, topics: List[str], difficulty: str = 'intermediate') -> Dict[str, Any]:
        """Generate question/answer flashcards for `topics`."""
        prompt = (
            'Create high quality question and answer flashcards for the following topics. '
            'Each card has question, answer and topic fields.\n\n'
            f'Topics: {", ".join(topics)}\n'
            f'Difficulty: {difficulty}\n\n'
            'Return JSON in this format:\n'
            '{"cards": [{"question": "question", "answer": "answer", "topic": "related topic"}]}'
        )

        data = self._complete('generate_cards', prompt,
                              stub=lambda: self._stub_cards(topics, difficulty))
        if not isinstance(data.get('cards'), list):
            raise AIServiceError('AI card response is missing cards')
        return data

    def generate_study_activities(self, profile: Dict[str, Any], candidate: Dict[str, Any],
                                  common_topics: List[str]) -> List[str]:
        """Suggest joint study activities for two learners."""
        prompt = (
            'Two learners were matched as study partners. Suggest up to three concrete '
            'activities they could do together.\n\n'
            f'Learner A: {json.dumps(profile)}\n'
            f'Learner B: {json.dumps(candidate)}\n'
            f'Shared topics: {", ".join(common_topics) or "none"}\n\n'
            'Return JSON in this format:\n'
            '{"activities": ["activity"]}'
        )

        data = self._complete('generate_study_activities', prompt,
                              stub=lambda: self._stub_activities(common_topics))
        activities = data.get('activities')
        if not isinstance(activities, list):
            raise AIServiceError('AI activity response is missing activities')
        return [str(a) for a in activities if a]

    def generate_discussion_topics(self, learning_patterns: Dict[str, Any],
                                   knowledge_gaps: List[Dict[str, Any]]) -> List[Dict[str, str]]:
        """Suggest discussion topics for a learner looking for study partners."""
        prompt = (
            'Based on the learner profile and knowledge gaps below, suggest discussion '
            'topics for a study group and explain each choice briefly.\n\n'
            f'Learning patterns: {json.dumps(learning_patterns)}\n'
            f'Knowledge gaps: {json.dumps(knowledge_gaps)}\n\n'
            'Return JSON in this format:\n'
            '{"topics": [{"topic": "topic", "reason": "why"}]}'
        )

        data = self._complete('generate_discussion_topics', prompt,
                              stub=lambda: self._stub_discussion(knowledge_gaps))
        topics = data.get('topics')
        if not isinstance(topics, list):
            raise AIServiceError('AI discussion response is missing topics')
        return [t for t in topics if isinstance(t, dict) and t.get('topic')]

    def _use_stub(self) -> bool:
        config = current_app.config
        return bool(config.get('TESTING')) or not config.get('AI_API_KEY')

    def _complete(self, operation: str, prompt: str, stub) -> Dict[str, Any]:
        """Send `prompt` (or produce the stub reply) and parse the JSON it contains."""
        started_at = time.time()
        try:
            if self._use_stub():
                self.logger.info(f"Using stub AI response (testing or no AI_API_KEY). operation={operation}")
                reply = 'Here is the result:\n```json\n' + json.dumps(stub()) + '\n```'
            else:
                reply = self._call_openai(operation, prompt)
            data = extract_json_block(reply)
        except AIServiceError as e:
            elapsed = time.time() - started_at
            observe_ai_call(operation, False, elapsed)
            request_logger.ai_call(operation, False, int(elapsed * 1000), e)
            raise

        elapsed = time.time() - started_at
        observe_ai_call(operation, True, elapsed)
        request_logger.ai_call(operation, True, int(elapsed * 1000))
        return data

    def _call_openai(self, operation: str, prompt: str) -> str:
        """Call the chat-completion endpoint with structured logging and error handling."""
        config = current_app.config
        api_key = config['AI_API_KEY']
        model = config.get('AI_MODEL', 'gpt-4o-mini')
        temperature = config.get('AI_TEMPERATURE', 0.7)
        masked_key = f"***{api_key[-4:]}" if len(api_key) >= 4 else "***"

        # Log outbound call without sensitive payload
        self.logger.info(
            json.dumps({
                'event': 'ai_request_start',
                'operation': operation,
                'model': model,
                'temperature': temperature,
                'prompt_tokens_estimate': count_tokens(prompt, model),
                'api_key_last4': masked_key,
            })
        )

        try:
            client = OpenAI(api_key=api_key, base_url=config.get('AI_BASE_URL'))
            started_at = time.time()
            completion = client.chat.completions.create(
                model=model,
                messages=[
                    {'role': 'system', 'content': SYSTEM_PROMPT},
                    {'role': 'user', 'content': prompt},
                ],
                temperature=float(temperature),
            )
            elapsed_ms = int((time.time() - started_at) * 1000)
        except OpenAIError as e:
            status = getattr(e, 'status_code', None)
            self.logger.error(
                json.dumps({
                    'event': 'ai_request_error',
                    'operation': operation,
                    'model': model,
                    'status': status,
                    'error': str(e)[:500],
                })
            )
            # Map common error types to messages (rate limit, auth, etc.)
            if status == 401:
                message = 'AI provider authentication failed'
            elif status == 429:
                message = 'AI provider rate limit exceeded'
            elif status and int(status) >= 500:
                message = 'AI provider service error'
            else:
                message = 'AI service error occurred'
            raise AIServiceError(message) from e

        content = completion.choices[0].message.content if completion.choices else ''
        usage = getattr(completion, 'usage', None)
        self.logger.info(
            json.dumps({
                'event': 'ai_request_success',
                'operation': operation,
                'model': model,
                'completion_id': getattr(completion, 'id', f"chatcmpl-{uuid.uuid4().hex[:29]}"),
                'elapsed_ms': elapsed_ms,
                'api_key_last4': masked_key,
                'usage': {
                    'prompt_tokens': getattr(usage, 'prompt_tokens', 0) or 0,
                    'completion_tokens': getattr(usage, 'completion_tokens', 0) or 0,
                    'total_tokens': getattr(usage, 'total_tokens', 0) or 0,
                },
            })
        )
        return content or ''

    @staticmethod
    def _stub_analysis(user_assessment: Optional[Dict[str, float]]) -> Dict[str, Any]:
        topics = [
            {'topic': 'Machine learning algorithms', 'confidence': 0.8, 'isBlindSpot': False},
            {'topic': 'Data pattern recognition', 'confidence': 0.3, 'isBlindSpot': True},
            {'topic': 'Algorithm optimization', 'confidence': 0.2, 'isBlindSpot': True},
        ]
        for topic, confidence in (user_assessment or {}).items():
            topics.append({'topic': topic, 'confidence': confidence, 'isBlindSpot': confidence < 0.5})
        return {
            'topics': topics,
            'analysis': ('Solid grasp of machine learning algorithms, with gaps in data pattern '
                         'recognition and algorithm optimization worth reviewing first.'),
        }

    @staticmethod
    def _stub_cards(topics: List[str], difficulty: str) -> Dict[str, Any]:
        return {
            'cards': [
                {
                    'question': f'What is {topic}?',
                    'answer': f'A {difficulty}-level summary of {topic} and why it matters.',
                    'topic': topic,
                }
                for topic in topics
            ]
        }

    @staticmethod
    def _stub_activities(common_topics: List[str]) -> Dict[str, Any]:
        if not common_topics:
            return {'activities': ['Compare notes from your latest study session']}
        return {'activities': [f'Quiz each other on {common_topics[0]}',
                               f'Explain {common_topics[-1]} to each other in five minutes']}

    @staticmethod
    def _stub_discussion(knowledge_gaps: List[Dict[str, Any]]) -> Dict[str, Any]:
        weakest = sorted(knowledge_gaps, key=lambda g: g.get('confidence', 1.0))[:3]
        return {
            'topics': [
                {'topic': gap['topic'], 'reason': f"Your confidence in {gap['topic']} is low"}
                for gap in weakest
            ]
        }


# Global instance
ai_client = AIClient()
