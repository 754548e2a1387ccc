"""
Curated medication knowledge base.

Each rule maps a set of trigger substrings to one canned answer. Rules are
evaluated in declaration order against the lower-cased message and the first
rule with any trigger present wins, so a message mentioning both vitamin D and
vitamin C gets the vitamin D answer. Keep that in mind when inserting rules.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class KnowledgeRule:
    triggers: frozenset[str]
    response: str

    def matches(self, normalized_message: str) -> bool:
        return any(trigger in normalized_message for trigger in self.triggers)


def _rule(triggers: list[str], response: str) -> KnowledgeRule:
    return KnowledgeRule(triggers=frozenset(t.lower() for t in triggers), response=response)


KNOWLEDGE_RULES: tuple[KnowledgeRule, ...] = (
    _rule(
        ["aspirin", "acetylsalicylic"],
        "Aspirin: For pain or fever, adults typically take 325 to 650 mg every 4 hours "
        "as needed, not exceeding 4,000 mg in 24 hours. Low-dose aspirin (81 mg) is "
        "sometimes prescribed for heart protection, but only start it on a doctor's "
        "advice. Take it with food or water to reduce stomach upset, and avoid it if "
        "you have a bleeding disorder, stomach ulcers, or are under 18 (risk of Reye's "
        "syndrome).",
    ),
    _rule(
        ["ibuprofen", "advil", "motrin"],
        "Ibuprofen (Advil, Motrin): The usual adult over-the-counter dose is 200 to 400 mg "
        "every 4 to 6 hours as needed, with no more than 1,200 mg per day unless your "
        "doctor advises otherwise. Take it with food or milk to protect your stomach. "
        "Avoid it if you have kidney problems, stomach ulcers, or are taking blood "
        "thinners, and check with your doctor if you have high blood pressure or heart "
        "disease.",
    ),
    _rule(
        ["acetaminophen", "paracetamol", "tylenol"],
        "Acetaminophen (Tylenol, paracetamol): Adults typically take 500 to 1,000 mg every "
        "4 to 6 hours as needed, not exceeding 3,000 to 4,000 mg in 24 hours. Many cold "
        "and flu products also contain acetaminophen, so check labels to avoid doubling "
        "up. Limit alcohol while taking it, as the combination can harm your liver.",
    ),
    _rule(
        ["naproxen", "aleve"],
        "Naproxen (Aleve): The usual adult dose is 220 mg every 8 to 12 hours, with no "
        "more than 660 mg in 24 hours for over-the-counter use. Take it with food and a "
        "full glass of water. Like other anti-inflammatories it can irritate the stomach "
        "and affect kidney function, so avoid long-term use without medical advice.",
    ),
    _rule(
        ["antihistamine", "allergy", "allergies", "benadryl", "cetirizine", "zyrtec",
         "loratadine", "claritin"],
        "Antihistamines: Non-drowsy options such as cetirizine (Zyrtec) or loratadine "
        "(Claritin) are usually taken once daily. Diphenhydramine (Benadryl) works "
        "quickly but causes drowsiness, so avoid driving after taking it. Do not combine "
        "multiple antihistamines, and ask your pharmacist if you take sleep aids or "
        "sedatives.",
    ),
    _rule(
        ["vitamin d"],
        "Vitamin D: Most adults need 600 to 800 IU (15 to 20 mcg) per day, though your "
        "doctor may recommend more if a blood test shows you are low. It is fat-soluble, "
        "so take it with a meal that contains some fat for better absorption. Avoid very "
        "high doses over long periods, as vitamin D can build up in the body.",
    ),
    _rule(
        ["vitamin c"],
        "Vitamin C: The recommended daily amount is about 75 mg for women and 90 mg for "
        "men. It is water-soluble, so excess is usually excreted, but doses above 2,000 mg "
        "a day can cause stomach upset or diarrhea. Vitamin C can improve iron absorption "
        "when taken together with an iron supplement.",
    ),
    _rule(
        ["vitamin b12", "b12", "cobalamin"],
        "Vitamin B12: Adults need about 2.4 mcg per day. Supplements are commonly "
        "recommended for people over 50, vegetarians and vegans, and people taking "
        "metformin or acid-reducing medicines long term. B12 is generally safe, and it "
        "can be taken with or without food.",
    ),
    _rule(
        ["iron supplement", "iron tablet", "iron pill", "taking iron", "ferrous"],
        "Iron supplements: Take them on an empty stomach if you can tolerate it, or with "
        "a small amount of food if they upset your stomach. Taking iron with vitamin C "
        "helps absorption, while tea, coffee, dairy, and calcium supplements reduce it, so "
        "space those at least two hours apart. Iron commonly causes dark stools and "
        "constipation.",
    ),
    _rule(
        ["magnesium"],
        "Magnesium: Adults generally need 310 to 420 mg per day from food and supplements "
        "combined. Magnesium glycinate tends to be gentler on the stomach than magnesium "
        "oxide. It can reduce absorption of some antibiotics and thyroid medicines, so "
        "take it a few hours apart from them.",
    ),
    _rule(
        ["calcium"],
        "Calcium: Most adults need 1,000 to 1,200 mg per day from food and supplements "
        "combined. Your body absorbs calcium best in doses of 500 mg or less at a time. "
        "Calcium carbonate should be taken with food, while calcium citrate can be taken "
        "any time. Separate calcium from iron and thyroid medication by a few hours.",
    ),
    _rule(
        ["omega-3", "omega 3", "fish oil"],
        "Omega-3 / fish oil: Typical supplements provide 250 to 1,000 mg of combined "
        "EPA and DHA per day. Take them with a meal to reduce fishy aftertaste and "
        "improve absorption. Higher doses can increase bleeding risk, especially if you "
        "also take blood thinners.",
    ),
    _rule(
        ["melatonin", "sleep aid", "trouble sleeping", "insomnia"],
        "Melatonin and sleep: Start with a low dose of melatonin (0.5 to 3 mg) taken 30 to "
        "60 minutes before bedtime. It is intended for short-term use, such as jet lag or "
        "occasional sleeplessness. Keep a regular sleep schedule and limit screens before "
        "bed. If insomnia lasts more than a few weeks, talk to your doctor.",
    ),
    _rule(
        ["antibiotic", "amoxicillin", "azithromycin"],
        "Antibiotics: Take the full course exactly as prescribed, even if you feel better "
        "before it is finished, and space doses evenly through the day. Antibiotics do "
        "not work against viral infections like colds. Contact your doctor if you develop "
        "a rash, swelling, or severe diarrhea.",
    ),
    _rule(
        ["missed dose", "missed a dose", "missed my", "forgot to take", "forgot my"],
        "Missed dose: In most cases, take the missed dose as soon as you remember. If it "
        "is almost time for your next dose, skip the missed one and continue your regular "
        "schedule. Never take a double dose to make up for a missed one. Some medicines, "
        "such as birth control or blood thinners, have specific rules, so check the "
        "leaflet or ask your pharmacist.",
    ),
    _rule(
        ["interaction", "take together", "taken together", "mix medication",
         "mixing medication", "combine medication"],
        "Drug interactions: Some medicines, supplements, and foods change how other "
        "medicines work. Keep an up-to-date list of everything you take, including "
        "vitamins and herbal products, and share it with your doctor and pharmacist. Your "
        "pharmacist can check specific combinations for you.",
    ),
    _rule(
        ["alcohol", "beer", "wine", "drinking while"],
        "Alcohol and medication: Alcohol can interact with many medicines, including "
        "painkillers, antibiotics, antidepressants, sleep aids, and diabetes medicines. It "
        "can increase drowsiness, stomach bleeding risk, or liver strain. Check the "
        "medication leaflet or ask your pharmacist before drinking.",
    ),
    _rule(
        ["grapefruit"],
        "Grapefruit: Grapefruit and its juice can raise blood levels of certain "
        "medicines, including some statins, blood pressure medicines, and "
        "anti-anxiety drugs. If your medication label warns about grapefruit, avoid it "
        "entirely rather than just spacing it out.",
    ),
    _rule(
        ["side effect", "side-effect", "adverse reaction"],
        "Side effects: Mild side effects such as nausea or drowsiness often ease after "
        "the first few days. Seek medical help immediately for difficulty breathing, "
        "swelling of the face or throat, chest pain, or a severe rash. Do not stop a "
        "prescribed medicine on your own without talking to your doctor.",
    ),
    _rule(
        ["store my", "storage", "how to store", "expired", "expiration"],
        "Medication storage: Keep medicines in a cool, dry place away from direct "
        "sunlight, and out of the bathroom where humidity is high. Store them out of "
        "reach of children and pets. Do not use expired medicines; many pharmacies offer "
        "take-back programs for safe disposal.",
    ),
    _rule(
        ["add a medication", "add medication", "new medication", "add my medication"],
        "Adding a medication: Open your dashboard and use the add medication form. Enter "
        "the medication name, the time you take it, how often (for example daily or "
        "twice daily), and the dosage, then save. It will appear in your schedule list, "
        "where you can edit or delete it later.",
    ),
    _rule(
        ["remind", "reminder", "notification"],
        "Reminders: Each medication in your schedule has a time. Set the time when you "
        "add or edit a medication and keep your schedule list up to date so you can see "
        "what is due next. Marking a dose as taken records it in your history.",
    ),
    _rule(
        ["export", "pdf", "report", "medication history", "taken history"],
        "History and reports: The medication history page lists every dose you have "
        "marked as taken, newest first. You can export your history as a PDF report to "
        "share with your doctor or pharmacist at your next appointment.",
    ),
)


def match_knowledge(
    message: str,
    rules: tuple[KnowledgeRule, ...] = KNOWLEDGE_RULES,
) -> str | None:
    normalized = message.lower()
    for rule in rules:
        if rule.matches(normalized):
            return rule.response
    return None
