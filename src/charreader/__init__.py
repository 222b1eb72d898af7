"""
charreader - character reader toolkit

A from-scratch eigen decomposition engine (QR decomposition, QR algorithm,
eigenvectors by row reduction) for principal-component analysis of pixel
matrices, and a multilayer perceptron trained by error backpropagation to
classify greyscale pixel vectors.
"""

from .activations import Activation
from .eigen import EigenResult, eigen_decomposition, eigenvalues, eigenvector, schur_form
from .errors import CharReaderError, DecompositionError, NullInputError, ShapeMismatchError
from .linalg import column_norm, multiply, project
from .network import MultilayerNetwork, one_hot
from .pca import PrincipalComponents, covariance, principal_components
from .perceptron import Perceptron
from .qr import qr_decompose
from .training import TrainingHistory, evaluate_network, train_network, train_perceptron

__version__ = "1.0.0"
__author__ = "charreader developers"

__all__ = [
    "Activation",
    "CharReaderError",
    "DecompositionError",
    "EigenResult",
    "MultilayerNetwork",
    "NullInputError",
    "Perceptron",
    "PrincipalComponents",
    "ShapeMismatchError",
    "TrainingHistory",
    "column_norm",
    "covariance",
    "eigen_decomposition",
    "eigenvalues",
    "eigenvector",
    "evaluate_network",
    "multiply",
    "one_hot",
    "principal_components",
    "project",
    "qr_decompose",
    "schur_form",
    "train_network",
    "train_perceptron",
]
