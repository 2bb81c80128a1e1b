"""
Example: Stochastic training of a logistic regression model

Fits a sparse logistic model with SGD (L1 proximal step) and with AdaGrad,
then reports the training loss and accuracy of each.
"""

import numpy as np

from descentkit import (
    LogisticLossObjective,
    StepSizeSchedule,
    StochasticMethod,
    StochasticSolverConfig,
    minimize,
)


def make_data(rng, n_examples=500):
    features = rng.normal(size=(n_examples, 5))
    true_weights = np.array([2.0, -1.0, 0.0, 0.0, 0.5])
    logits = features @ true_weights
    labels = (rng.uniform(size=n_examples) < 1.0 / (1.0 + np.exp(-logits))).astype(float)
    return features, labels


def train(objective, features, labels, method, l1):
    config = StochasticSolverConfig(
        method=method,
        batch_size=32,
        step_size_schedule=StepSizeSchedule.CONSTANT,
        step_size_parameters=(0.2,),
        l1_regularization_weight=l1,
        maximum_iterations=2000,
        seed=7,
    )
    res = minimize(objective, np.zeros(features.shape[1]), config)
    accuracy = np.mean((objective.predict_probabilities(res.x, features) > 0.5) == (labels > 0.5))
    print(f"{method.name:18s} l1={l1:<5} loss={res.fun:.4f} accuracy={accuracy:.3f}")
    print(f"    weights = {np.round(res.x, 3)}")
    return res


if __name__ == "__main__":
    print("=" * 60)
    print("descentkit - Logistic regression with stochastic solvers")
    print("=" * 60)
    rng = np.random.default_rng(0)
    features, labels = make_data(rng)
    objective = LogisticLossObjective(features, labels)
    train(objective, features, labels, StochasticMethod.GRADIENT_DESCENT, 0.0)
    train(objective, features, labels, StochasticMethod.GRADIENT_DESCENT, 0.02)
    train(objective, features, labels, StochasticMethod.ADAGRAD, 0.0)
    print("\nDone.")
