"""End-of-round goal catalog for the base game and the European and Oceania expansions."""

NO_GOAL_ID = 'oc-no-goal'

EXPANSIONS = ('base', 'european', 'oceania')


def _goal(goal_id, name, description, expansion):
    return {'id': goal_id, 'name': name, 'description': description, 'expansion': expansion}


BASE_GAME_GOALS = [
    _goal('base-birds-forest', 'Birds in Forest',
          'Count the total number of birds you have played in your forest habitat', 'base'),
    _goal('base-birds-grassland', 'Birds in Grassland',
          'Count the total number of birds you have played in your grassland habitat', 'base'),
    _goal('base-birds-wetland', 'Birds in Wetland',
          'Count the total number of birds you have played in your wetland habitat', 'base'),
    _goal('base-birds-bowl-egg', 'Birds with Bowl Nests + Egg',
          'Count birds with a bowl nest that have at least 1 egg (star nests count)', 'base'),
    _goal('base-birds-cavity-egg', 'Birds with Cavity Nests + Egg',
          'Count birds with a cavity nest that have at least 1 egg (star nests count)', 'base'),
    _goal('base-birds-ground-egg', 'Birds with Ground Nests + Egg',
          'Count birds with a ground nest that have at least 1 egg', 'base'),
    _goal('base-birds-platform-egg', 'Birds with Platform Nests + Egg',
          'Count birds with a platform nest that have at least 1 egg (star nests count)', 'base'),
    _goal('base-eggs-forest', 'Eggs in Forest',
          'Count the total number of eggs in your forest habitat (multiple eggs on one bird each count)', 'base'),
    _goal('base-eggs-grassland', 'Eggs in Grassland',
          'Count the total number of eggs in your grassland habitat (multiple eggs on one bird each count)', 'base'),
    _goal('base-eggs-wetland', 'Eggs in Wetland',
          'Count the total number of eggs in your wetland habitat (multiple eggs on one bird each count)', 'base'),
    _goal('base-eggs-bowl', 'Eggs on Bowl Nests',
          'Count the total number of eggs on birds with a bowl nest (star nests count)', 'base'),
    _goal('base-eggs-cavity', 'Eggs on Cavity Nests',
          'Count the total number of eggs on birds with a cavity nest (star nests count)', 'base'),
    _goal('base-eggs-ground', 'Eggs on Ground Nests',
          'Count the total number of eggs on birds with a ground nest', 'base'),
    _goal('base-eggs-platform', 'Eggs on Platform Nests',
          'Count the total number of eggs on birds with a platform nest (star nests count)', 'base'),
    _goal('base-egg-sets', 'Sets of Eggs in Each Habitat',
          'Count sets of eggs (1 set = 1 egg in wetland + 1 egg in grassland + 1 egg in forest)', 'base'),
    _goal('base-total-birds', 'Total Birds Played',
          'Count the total number of birds you have played', 'base'),
]

EUROPEAN_GOALS = [
    _goal('eu-birds-tucked', 'Birds with Tucked Cards',
          'Count the total number of birds that have at least 1 tucked card', 'european'),
    _goal('eu-food-cost', 'Food Cost of Played Birds',
          'Count the total number of food symbols in the food cost of your bird cards', 'european'),
    _goal('eu-birds-one-row', 'Birds in One Row',
          'Count birds in the single habitat row where you have the most birds', 'european'),
    _goal('eu-filled-columns', 'Filled Columns',
          'Count the number of columns with all 5 spaces filled', 'european'),
    _goal('eu-brown-powers', 'Birds with Brown Powers',
          'Count the total number of birds with brown (when activated) powers', 'european'),
    _goal('eu-white-no-powers', 'Birds with White/No Powers',
          'Count the total number of birds with white (when played) or no powers', 'european'),
    _goal('eu-birds-high-value', 'Birds Worth > 4 Points',
          'Count the total number of birds worth more than 4 victory points', 'european'),
    _goal('eu-birds-no-eggs', 'Birds with No Eggs',
          'Count the total number of birds that have no eggs on them', 'european'),
    _goal('eu-food-supply', 'Food in Personal Supply',
          'Count the total number of food tokens in your personal supply', 'european'),
    _goal('eu-cards-hand', 'Bird Cards in Hand',
          'Count the total number of bird cards in your hand', 'european'),
]

OCEANIA_GOALS = [
    _goal('oc-beak-left', 'Beak Pointing Left',
          'Count the total number of birds whose beak is pointing left', 'oceania'),
    _goal('oc-beak-right', 'Beak Pointing Right',
          'Count the total number of birds whose beak is pointing right', 'oceania'),
    _goal('oc-invertebrate-cost', 'Invertebrate in Food Cost',
          'Count the number of invertebrate symbols in the food cost of your bird cards', 'oceania'),
    _goal('oc-fruit-seed-cost', 'Fruit + Seed in Food Cost',
          'Count the total number of fruit and seed symbols in the food cost of your bird cards', 'oceania'),
    _goal(NO_GOAL_ID, 'No Goal',
          'No goal is scored this round. Keep your action cube and gain 1 extra turn in all following rounds',
          'oceania'),
    _goal('oc-rat-fish-cost', 'Rat + Fish in Food Cost',
          'Count the total number of rat and fish symbols in the food cost of your bird cards', 'oceania'),
    _goal('oc-cubes-play-bird', 'Cubes on Play a Bird',
          'Count the total number of action cubes on the "Play a Bird" action', 'oceania'),
    _goal('oc-birds-low-value', 'Birds Worth ≤ 3 Points',
          'Count the total number of birds worth 3 or fewer victory points', 'oceania'),
]

_BY_EXPANSION = {
    'base': BASE_GAME_GOALS,
    'european': EUROPEAN_GOALS,
    'oceania': OCEANIA_GOALS,
}


def get_goals(include_base: bool = True, include_european: bool = True, include_oceania: bool = True) -> list:
    """Return copies of the goals of every enabled expansion, in catalog order."""
    flags = {'base': include_base, 'european': include_european, 'oceania': include_oceania}
    return [dict(g) for name in EXPANSIONS if flags[name] for g in _BY_EXPANSION[name]]


def find_goal(goal_id):
    for name in EXPANSIONS:
        for g in _BY_EXPANSION[name]:
            if g['id'] == goal_id:
                return dict(g)
    return None


def is_no_goal(goal) -> bool:
    return bool(goal) and goal.get('id') == NO_GOAL_ID
