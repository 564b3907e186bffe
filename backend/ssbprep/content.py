"""Default content banks and fixed catalogues (OLQs, badges, SDT prompts)."""

from __future__ import annotations

import copy
from typing import Any, Dict, List


TAT_IMAGES_DEFAULT: List[str] = [
	"https://images.weserv.nl/?url=i.imgur.com/8os3v26.jpeg",  # Boy looking out window
	"https://images.weserv.nl/?url=i.imgur.com/m4L35vC.jpeg",  # Man at desk
	"https://images.weserv.nl/?url=i.imgur.com/T5a2F3s.jpeg",  # Field scene with person down
	"https://images.weserv.nl/?url=i.imgur.com/y3J3f7Y.jpeg",  # Bedroom scene
	"https://images.weserv.nl/?url=i.imgur.com/eYhPh2T.jpeg",  # Lab/workshop scene
	"https://images.weserv.nl/?url=i.imgur.com/O0B8a4l.jpeg",  # Rock climbing
	"https://images.weserv.nl/?url=i.imgur.com/Jd1mJtL.jpeg",  # Group planning
	"https://images.weserv.nl/?url=i.imgur.com/bW3qY0f.jpeg",  # Formal couple
	"https://images.weserv.nl/?url=i.imgur.com/wP0b6bB.jpeg",  # Stormy sea
	"https://images.weserv.nl/?url=i.imgur.com/c1g2g3H.jpeg",  # Lone person in desert
	"https://images.weserv.nl/?url=i.imgur.com/k9f7b1s.jpeg",  # Rescue scene
	"https://images.weserv.nl/?url=i.imgur.com/5J3e2eF.png",  # Blank card
]

WAT_WORDS_DEFAULT: List[str] = [
	"Duty", "Courage", "Team", "Defeat", "Lead", "Responsibility", "Friend", "Failure", "Order", "Discipline",
	"Work", "Army", "Risk", "Success", "Challenge", "Honour", "Sacrifice", "Tension", "Brave", "Win",
	"Attack", "Weapon", "Strategy", "Calm", "Confidence", "Obstacle", "Cooperate", "Help", "Officer", "System",
	"Possible", "Worry", "Afraid", "Nervous", "Difficult", "Obey", "Command", "Follow", "Unity", "Effort",
	"Aim", "Goal", "Serious", "Mature", "Peace", "War", "Nation", "Sports", "Love", "Death",
]

SRT_SCENARIOS_DEFAULT: List[str] = [
	"You are on your way to an important exam and you see an accident. You are the first person to arrive. What would you do?",
	"During a group task, your team members are not cooperating. What would you do?",
	"You are the captain of a sports team which is about to lose a crucial match. How will you motivate your team?",
	"While traveling by train, you notice a fellow passenger has left their bag behind. What steps will you take?",
	"You have been assigned a difficult task with a very tight deadline. What is your course of action?",
]

LECTURERETTE_TOPICS_DEFAULT: List[str] = [
	"My Favourite Hobby",
	"The Importance of Discipline in Life",
	"India in 2047",
	"Artificial Intelligence: A Boon or a Bane?",
	"My Role Model",
	"Indo-China Relations",
	"Cyber Security",
	"Make in India Initiative",
]

SDT_PROMPTS: List[str] = [
	"What do your parents think of you?",
	"What do your teachers/superiors think of you?",
	"What do your friends think of you?",
	"What do you think of yourself? (Your strengths and weaknesses)",
	"What kind of person would you like to become?",
]

_VERBAL_CATEGORIES = ["Series Completion", "Analogy", "Coding-Decoding", "Odd One Out"]
_NON_VERBAL_CATEGORIES = ["Figure Series", "Figure Analogy", "Odd One Out", "Mirror Image"]
_IMG = "https://images.weserv.nl/?url="

OIR_VERBAL_QUESTIONS_BANK: List[Dict[str, Any]] = [
	{"type": "verbal", "category": "Series Completion", "question": "Which number should come next in the series? 2, 6, 12, 20, 30, ?", "options": ["42", "40", "36", "48"], "answer": "42"},
	{"type": "verbal", "category": "Analogy", "question": "Doctor is to Patient as Lawyer is to ?", "options": ["Client", "Customer", "Accused", "Magistrate"], "answer": "Client"},
	{"type": "verbal", "category": "Coding-Decoding", "question": 'If "EARTH" is written as "QPMZS", how is "HEART" written in that code?', "options": ["SQPZM", "SQMPZ", "SPQZM", "QSPZM"], "answer": "SQPZM"},
	{"type": "verbal", "category": "Direction Sense", "question": "A man facing North turns 90 degrees clockwise, then 180 degrees anti-clockwise. Which direction is he facing now?", "options": ["West", "East", "North", "South"], "answer": "West"},
	{"type": "verbal", "category": "Blood Relations", "question": "Pointing to a photograph, a man said, \"I have no brother or sister but that man's father is my father's son.\" Whose photograph was it?", "options": ["His own", "His Son's", "His Father's", "His Nephew's"], "answer": "His Son's"},
	{"type": "verbal", "category": "Odd One Out", "question": "Find the odd one out: ", "options": ["Carrot", "Ginger", "Potato", "Tomato"], "answer": "Tomato"},
	{"type": "verbal", "category": "Jumbled Words", "question": 'Rearrange the letters "RTA M" to form a meaningful word.', "options": ["MART", "TRAM", "ARMT", "RAMT"], "answer": "MART"},
	{"type": "verbal", "category": "Series Completion", "question": "Find the next letters in the series: A, C, F, J, O, ?", "options": ["U", "V", "T", "S"], "answer": "U"},
	{"type": "verbal", "category": "Analogy", "question": "Moon is to Satellite as Earth is to ?", "options": ["Sun", "Planet", "Solar System", "Asteroid"], "answer": "Planet"},
] + [
	{
		"type": "verbal",
		"category": _VERBAL_CATEGORIES[i % 4],
		"question": f"Sample Verbal Question {i + 10} of a new category.",
		"options": [f"Option A{i}", f"Option B{i}", f"Option C{i}", f"Correct Answer {i}"],
		"answer": f"Correct Answer {i}",
	}
	for i in range(41)
]

OIR_NON_VERBAL_QUESTIONS_BANK: List[Dict[str, Any]] = [
	{
		"type": "non-verbal", "category": "Figure Series", "question": "Which figure comes next in the series?",
		"image_url": _IMG + "i.imgur.com/AFIsI5A.png",
		"options": [_IMG + "i.imgur.com/z1vA3qC.png", _IMG + "i.imgur.com/k9b8d7e.png", _IMG + "i.imgur.com/o3f4g5h.png", _IMG + "i.imgur.com/x6j7k8l.png"],
		"answer": _IMG + "i.imgur.com/k9b8d7e.png",
	},
	{
		"type": "non-verbal", "category": "Figure Analogy", "question": "Find the relationship in the first pair and apply it to the second pair.",
		"image_url": _IMG + "i.imgur.com/C5mJ1nB.png",
		"options": [_IMG + "i.imgur.com/T0b1c2D.png", _IMG + "i.imgur.com/E3f4g5H.png", _IMG + "i.imgur.com/A6h7i8J.png", _IMG + "i.imgur.com/L9k0l1M.png"],
		"answer": _IMG + "i.imgur.com/A6h7i8J.png",
	},
	{
		"type": "non-verbal", "category": "Odd One Out", "question": "Which figure is the odd one out?",
		"image_url": _IMG + "i.imgur.com/P4q5r6S.png",
		"options": ["A", "B", "C", "D"],
		"answer": "C",
	},
	{
		"type": "non-verbal", "category": "Mirror Image", "question": "Find the correct mirror image of the given figure.",
		"image_url": _IMG + "i.imgur.com/W7x8y9Z.png",
		"options": [_IMG + "i.imgur.com/a1b2c3D.png", _IMG + "i.imgur.com/e4f5g6H.png", _IMG + "i.imgur.com/i7j8k9L.png", _IMG + "i.imgur.com/m0n1o2P.png"],
		"answer": _IMG + "i.imgur.com/e4f5g6H.png",
	},
] + [
	{
		"type": "non-verbal",
		"category": _NON_VERBAL_CATEGORIES[i % 4],
		"question": f"Which figure completes the pattern? (Sample {i + 5})",
		"image_url": _IMG + f"placehold.co/400x100.png?text=Problem+Figure+{i + 5}",
		"options": [
			_IMG + "placehold.co/150x150.png?text=A",
			_IMG + "placehold.co/150x150.png?text=Correct",
			_IMG + "placehold.co/150x150.png?text=C",
			_IMG + "placehold.co/150x150.png?text=D",
		],
		"answer": _IMG + "placehold.co/150x150.png?text=Correct",
	}
	for i in range(46)
]

GPE_SCENARIOS_DEFAULT: List[Dict[str, Any]] = [
	{
		"title": "Flood Rescue Mission",
		"map_image": _IMG + "i.imgur.com/kYqE1wS.png",
		"problem_statement": (
			"You are a group of 8 college students on a hiking trip near the village of Rampur. A sudden cloudburst has caused flash floods. "
			"You are at a point A. The bridge connecting Rampur to the main road has been washed away. "
			"You overhear on a villager's radio that a rescue team will arrive in 3 hours. You have the following information:\n"
			"- A group of 15 villagers, including elderly and children, are stranded at the village temple (Point B), which is on higher ground but isolated.\n"
			"- Two injured hikers are trapped in a cave at Point C, needing immediate first aid.\n"
			"- The local dispensary at Point D has a first aid box but the doctor is out of town.\n"
			"- A partially damaged boat is available at Point E.\n"
			"You have a small first aid kit, a rope, and mobile phones with low battery. "
			"Your task is to make a plan to ensure the safety of everyone until the rescue team arrives."
		),
	}
]

OLQ_LIST: List[str] = [
	"Effective Intelligence", "Reasoning Ability", "Organizing Ability", "Power of Expression",
	"Social Adaptability", "Cooperation", "Sense of Responsibility", "Initiative", "Self Confidence",
	"Speed of Decision", "Ability to Influence a Group", "Liveliness", "Determination", "Courage", "Stamina",
]

BADGES: Dict[str, Dict[str, str]] = {
	"first_step": {"name": "First Step", "desc": "Complete your very first test.", "icon": "https://cdn-icons-png.flaticon.com/512/3135/3135715.png"},
	"psych_initiate": {"name": "Psych Initiate", "desc": "Complete one of each psychological test (TAT, WAT, SRT, SDT).", "icon": "https://cdn-icons-png.flaticon.com/512/1048/1048949.png"},
	"consistent_cadet": {"name": "Consistent Cadet", "desc": "Practice for 3 days in a row.", "icon": "https://cdn-icons-png.flaticon.com/512/2936/2936384.png"},
	"story_weaver": {"name": "Story Weaver", "desc": "Complete 5 TAT tests.", "icon": "https://cdn-icons-png.flaticon.com/512/3501/3501377.png"},
	"word_warrior": {"name": "Word Warrior", "desc": "Complete 5 WAT tests.", "icon": "https://cdn-icons-png.flaticon.com/512/1005/1005391.png"},
	"orator_apprentice": {"name": "Orator Apprentice", "desc": "Complete your first Lecturerette.", "icon": "https://cdn-icons-png.flaticon.com/512/3062/3062531.png"},
	"interviewer_ace": {"name": "Interviewer Ace", "desc": "Complete your first AI voice interview.", "icon": "https://cdn-icons-png.flaticon.com/512/10239/10239456.png"},
	"group_strategist": {"name": "Group Strategist", "desc": "Complete your first GPE.", "icon": "https://cdn-icons-png.flaticon.com/512/330/330723.png"},
	"perfect_oir": {"name": "Perfect OIR", "desc": "Score 100% in an OIR test.", "icon": "https://cdn-icons-png.flaticon.com/512/1683/1683617.png"},
}

DEFAULT_PROFILE_PIC = _IMG + "i.imgur.com/V4RclNb.png"

# Banks holding plain strings vs. structured records
STRING_BANKS = ("tat_images", "wat_words", "srt_scenarios", "lecturerette_topics")
RECORD_BANKS = ("oir_verbal_questions", "oir_non_verbal_questions", "gpe_scenarios")


def default_content() -> Dict[str, List[Any]]:
	return copy.deepcopy({
		"tat_images": TAT_IMAGES_DEFAULT,
		"wat_words": WAT_WORDS_DEFAULT,
		"srt_scenarios": SRT_SCENARIOS_DEFAULT,
		"lecturerette_topics": LECTURERETTE_TOPICS_DEFAULT,
		"oir_verbal_questions": OIR_VERBAL_QUESTIONS_BANK,
		"oir_non_verbal_questions": OIR_NON_VERBAL_QUESTIONS_BANK,
		"gpe_scenarios": GPE_SCENARIOS_DEFAULT,
	})
