from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from notehub.db.models import Answer as AnswerModel
from notehub.db.models import Question as QuestionModel
from notehub.db.models import User as UserModel
from notehub.domains.notebooks.entities import Answer, Question


class QnARepository:
    """Репозиторий для вопросов и ответов к страницам"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_question(self, page_id: int, user_id: int, text: str) -> Question:
        """Создание вопроса"""
        db_question = QuestionModel(page_id=page_id, user_id=user_id, text=text)

        self.session.add(db_question)
        await self.session.commit()
        await self.session.refresh(db_question)

        name = await self._user_name(user_id)
        return Question(
            id=db_question.id,
            page_id=db_question.page_id,
            user_id=user_id,
            user_name=name,
            text=db_question.text,
            created_at=db_question.created_at
        )

    async def create_answer(self, question_id: int, user_id: int, text: str) -> Answer:
        """Создание ответа"""
        db_answer = AnswerModel(question_id=question_id, user_id=user_id, text=text)

        self.session.add(db_answer)
        await self.session.commit()
        await self.session.refresh(db_answer)

        name = await self._user_name(user_id)
        return self._answer(db_answer, name)

    async def get_thread(self, page_id: int) -> List[Question]:
        """Вопросы страницы, новые первыми, с ответами по порядку"""
        result = await self.session.execute(
            select(QuestionModel, UserModel.name)
            .join(UserModel, QuestionModel.user_id == UserModel.id)
            .where(QuestionModel.page_id == page_id)
            .order_by(QuestionModel.created_at.desc(), QuestionModel.id.desc())
        )
        questions = [
            Question(
                id=db_question.id,
                page_id=db_question.page_id,
                user_id=db_question.user_id,
                user_name=name,
                text=db_question.text,
                created_at=db_question.created_at
            )
            for db_question, name in result.all()
        ]
        if not questions:
            return questions

        by_id = {question.id: question for question in questions}
        answers = await self._answers_where(AnswerModel.question_id.in_(list(by_id)))
        for answer in answers:
            by_id[answer.question_id].answers.append(answer)
        return questions

    async def get_answers(self, question_id: int) -> List[Answer]:
        """Ответы на вопрос по порядку"""
        return await self._answers_where(AnswerModel.question_id == question_id)

    async def get_answer(self, answer_id: int) -> Optional[Answer]:
        answers = await self._answers_where(AnswerModel.id == answer_id)
        return answers[0] if answers else None

    async def _answers_where(self, condition) -> List[Answer]:
        result = await self.session.execute(
            select(AnswerModel, UserModel.name)
            .join(UserModel, AnswerModel.user_id == UserModel.id)
            .where(condition)
            .order_by(AnswerModel.created_at.asc(), AnswerModel.id.asc())
        )
        return [self._answer(db_answer, name) for db_answer, name in result.all()]

    async def _user_name(self, user_id: int) -> str:
        result = await self.session.execute(select(UserModel.name).where(UserModel.id == user_id))
        return result.scalar_one()

    @staticmethod
    def _answer(db_answer: AnswerModel, user_name: str) -> Answer:
        return Answer(
            id=db_answer.id,
            question_id=db_answer.question_id,
            user_id=db_answer.user_id,
            user_name=user_name,
            text=db_answer.text,
            created_at=db_answer.created_at
        )
